"""
Merged timeline construction.

Every CSV file is read independently: its time column is detected, each
row's timestamp is parsed, and rows that parse become TimelineEvents. Files
are processed on a thread pool; each worker returns a FileResult and the
orchestrator alone merges results, counts progress and sorts the union.

Failures are contained at the smallest unit: a bad row is dropped, a bad
file is recorded as skipped, and the build as a whole only ends early when
cancellation is requested.
"""

import csv
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from operator import attrgetter
from typing import Callable, Iterable, Optional, Sequence

from .models import CsvFileEntry, FileResult, FileSkip, TimelineEvent, TimelineReport
from .time_columns import detect_time_column
from .timestamps import parse_timestamp
from ..infrastructure.csv_reader import CsvRecordReader
from ..infrastructure.logging_config import get_logger

logger = get_logger(__name__)


MAX_DESCRIPTION_FIELDS = 6
"""Maximum number of header=value pairs in an event description."""

MAX_VALUE_LENGTH = 100
"""Values longer than this are cut down to this length, suffix included."""

TRUNCATION_SUFFIX = "..."

ProgressCallback = Callable[[int], None]


class TimelineCancelled(Exception):
    """Raised when a timeline build is cancelled before it completes."""


def build_description(headers: Sequence[str], row: Sequence[str], time_index: int) -> str:
    """
    Summarize a row as 'Header=value' pairs.

    The time column and blank values are left out. At most
    MAX_DESCRIPTION_FIELDS pairs are kept, in header order.

    Args:
        headers: Header names of the file.
        row: Field values of the row (may be shorter than headers).
        time_index: Index of the time column.

    Returns:
        The pairs joined by ', '.
    """
    parts = []

    for index, header in enumerate(headers):
        if len(parts) >= MAX_DESCRIPTION_FIELDS:
            break
        if index == time_index or index >= len(row):
            continue

        value = row[index]
        if not value.strip():
            continue

        if len(value) > MAX_VALUE_LENGTH:
            value = value[:MAX_VALUE_LENGTH - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX

        parts.append(f"{header}={value}")

    return ", ".join(parts)


def _row_to_event(
    entry: CsvFileEntry,
    headers: Sequence[str],
    row: Sequence[str],
    time_index: int
) -> Optional[TimelineEvent]:
    """Build an event from one row, or None if the row has no usable timestamp."""
    try:
        time_value = row[time_index] if time_index < len(row) else ""
        if not time_value.strip():
            return None

        timestamp = parse_timestamp(time_value)
        if timestamp is None:
            return None

        return TimelineEvent(
            timestamp=timestamp,
            source=entry.file_name,
            group_name=entry.group_name,
            description=build_description(headers, row, time_index),
            original_time_string=time_value
        )
    except Exception as e:
        logger.debug(f"Skipping row in {entry.file_name}: {e}")
        return None


def process_file(entry: CsvFileEntry) -> FileResult:
    """
    Extract timeline events from a single CSV file.

    This function does not raise: missing files, unreadable files and files
    without a recognizable time column come back as skipped results.

    Args:
        entry: The file to process.

    Returns:
        A FileResult holding the file's events in row order, or a skip reason.
    """
    events = []

    try:
        if not entry.full_path.is_file():
            logger.info(f"Skipping {entry.file_name}: file not found")
            return FileResult.skipped(entry, "file not found")

        with CsvRecordReader(entry.full_path) as reader:
            headers = reader.headers
            if not headers:
                logger.info(f"Skipping {entry.file_name}: no header row")
                return FileResult.skipped(entry, "no header row")

            time_column = detect_time_column(headers)
            if time_column is None:
                logger.info(f"Skipping {entry.file_name}: no time column detected")
                return FileResult.skipped(entry, "no time column")

            time_index = headers.index(time_column)
            logger.debug(f"{entry.file_name}: using time column '{time_column}'")

            for row in reader.rows():
                event = _row_to_event(entry, headers, row, time_index)
                if event is not None:
                    events.append(event)

            bad_records = reader.bad_records

    except (OSError, UnicodeError, csv.Error) as e:
        logger.warning(f"Skipping {entry.file_name}: cannot read file: {e}")
        return FileResult.skipped(entry, f"unreadable: {e}")
    except Exception as e:
        logger.warning(f"Skipping {entry.file_name}: {e}", exc_info=True)
        return FileResult.skipped(entry, f"error: {e}")

    if bad_records:
        logger.warning(f"{entry.file_name}: skipped {bad_records} malformed records")

    logger.debug(f"{entry.file_name}: {len(events)} events")
    return FileResult(entry=entry, events=events, bad_records=bad_records)


def merge_results(results: Iterable[FileResult]) -> list[TimelineEvent]:
    """
    Merge per-file events into one list sorted by timestamp.

    The sort is stable, so events with equal timestamps keep the order of
    the results passed in, and row order within each file.

    Args:
        results: Per-file results in input order.

    Returns:
        All events, ascending by timestamp.
    """
    events = [event for result in results for event in result.events]
    events.sort(key=attrgetter("timestamp"))
    return events


class TimelineBuilder:
    """
    Builds a merged timeline from many CSV files.

    Files are processed concurrently. Cancellation is cooperative and checked
    before each file starts, so a cancelled build returns after the files
    already in flight have finished.
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Initialize the builder.

        Args:
            max_workers: Worker thread count. None or 0 picks a default
                suitable for I/O-bound work.
        """
        if not max_workers:
            max_workers = min(32, (os.cpu_count() or 1) + 4)

        self.max_workers = max_workers

    def build(
        self,
        files: Sequence[CsvFileEntry],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> list[TimelineEvent]:
        """
        Build the merged timeline.

        Args:
            files: Files to read, in the order ties should be broken.
            progress_callback: Called with a percentage (0-100) after each file.
            cancel_event: Set this event to cancel the build.

        Returns:
            Events sorted by timestamp ascending.

        Raises:
            TimelineCancelled: If cancel_event was set before all files were processed.
        """
        return self.build_report(files, progress_callback, cancel_event).events

    def build_report(
        self,
        files: Sequence[CsvFileEntry],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> TimelineReport:
        """
        Build the merged timeline along with diagnostics about skipped files.

        Args:
            files: Files to read, in the order ties should be broken.
            progress_callback: Called with a percentage (0-100) after each file.
            cancel_event: Set this event to cancel the build.

        Returns:
            A TimelineReport with sorted events and the list of skipped files.

        Raises:
            TimelineCancelled: If cancel_event was set before all files were processed.
        """
        files = list(files)
        total = len(files)

        if _is_cancelled(cancel_event):
            raise TimelineCancelled("Timeline build cancelled")

        logger.info(f"Building timeline from {total} files ({self.max_workers} workers)")

        if total == 0:
            if progress_callback:
                progress_callback(100)
            return TimelineReport()

        results: list[Optional[FileResult]] = [None] * total
        completed = 0
        cancelled = False

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, total),
            thread_name_prefix="timeline"
        )
        try:
            future_to_index = {
                executor.submit(_process_unless_cancelled, entry, cancel_event): index
                for index, entry in enumerate(files)
            }

            for future in as_completed(future_to_index):
                result = future.result()
                if result is None or _is_cancelled(cancel_event):
                    cancelled = True
                    break

                results[future_to_index[future]] = result
                completed += 1

                if progress_callback:
                    progress_callback(completed * 100 // total)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        if cancelled:
            logger.info(f"Timeline build cancelled after {completed} of {total} files")
            raise TimelineCancelled("Timeline build cancelled")

        report = TimelineReport(
            events=merge_results(results),
            skipped=[
                FileSkip(file_name=result.entry.file_name, reason=result.skip_reason)
                for result in results
                if result.is_skipped
            ],
            files_processed=completed,
            bad_records=sum(result.bad_records for result in results)
        )

        logger.info(
            f"Timeline built: {len(report.events)} events from {total} files "
            f"({len(report.skipped)} skipped)"
        )
        return report


def _is_cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _process_unless_cancelled(
    entry: CsvFileEntry,
    cancel_event: Optional[threading.Event]
) -> Optional[FileResult]:
    """Worker entry point; returns None without touching the file once cancelled."""
    if _is_cancelled(cancel_event):
        return None
    return process_file(entry)


def build_timeline(
    files: Sequence[CsvFileEntry],
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    max_workers: Optional[int] = None
) -> list[TimelineEvent]:
    """
    Build a merged timeline with a default builder.

    Args:
        files: Files to read.
        progress_callback: Called with a percentage (0-100) after each file.
        cancel_event: Set this event to cancel the build.
        max_workers: Worker thread count (None for default).

    Returns:
        Events sorted by timestamp ascending.

    Raises:
        TimelineCancelled: If the build was cancelled.
    """
    return TimelineBuilder(max_workers=max_workers).build(files, progress_callback, cancel_event)
