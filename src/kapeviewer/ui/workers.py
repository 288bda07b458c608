"""
Worker threads for background operations.

This module provides worker threads for long-running operations that should
not block the UI thread, such as building the merged timeline.
"""

import threading
from typing import Optional, Sequence

from PySide6.QtCore import QThread, Signal

from kapeviewer.core.models import CsvFileEntry
from kapeviewer.core.timeline import TimelineBuilder, TimelineCancelled
from kapeviewer.infrastructure.logging_config import get_logger


logger = get_logger(__name__)


class TimelineBuilderThread(QThread):
    """
    Worker thread for building the merged timeline without blocking the UI.

    Exactly one of build_complete, build_cancelled or build_error is emitted
    when the thread finishes. A cancelled build produces no events, so the
    caller should keep whatever timeline it was showing before.
    """

    # Signal emitted after each file (percentage 0-100)
    progress_updated = Signal(int)

    # Signal emitted when the build is complete (TimelineReport)
    build_complete = Signal(object)

    # Signal emitted when the build was cancelled
    build_cancelled = Signal()

    # Signal emitted when an unexpected error occurs (error_message)
    build_error = Signal(str)

    def __init__(
        self,
        files: Sequence[CsvFileEntry],
        builder: Optional[TimelineBuilder] = None,
        parent=None
    ):
        """
        Initialize the builder thread.

        Args:
            files: Files to build the timeline from.
            builder: TimelineBuilder to use; a default one is created if None.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._files = list(files)
        self._builder = builder or TimelineBuilder()
        self._cancel_event = threading.Event()

    def run(self):
        """Run the timeline build."""
        try:
            report = self._builder.build_report(
                self._files,
                progress_callback=self.progress_updated.emit,
                cancel_event=self._cancel_event
            )
        except TimelineCancelled:
            self.build_cancelled.emit()
            return
        except Exception as e:
            logger.error(f"Error building timeline in thread: {e}", exc_info=True)
            self.build_error.emit(str(e))
            return

        self.build_complete.emit(report)

    def cancel(self):
        """Request cancellation; takes effect before the next file starts."""
        self._cancel_event.set()
        logger.info("Timeline build cancelled by user")

    def is_cancel_requested(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancel_event.is_set()
