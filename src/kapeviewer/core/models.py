"""
Core domain models for case folder and timeline representation.

This module contains pure data models representing discovered CSV files,
their groups, and merged timeline events.
These models are GUI-agnostic and should not import any UI frameworks.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional


DEFAULT_GROUP_NAME = "Other"
"""Group assigned to CSV files that sit directly under the scan root."""


@dataclass(frozen=True)
class CsvFileEntry:
    """Represents a single CSV file discovered in a case folder."""

    file_name: str
    """File name without directory (e.g., 'EvtxECmd_Output.csv')."""

    full_path: Path
    """Absolute path to the file."""

    group_name: str
    """Name of the group owning this file."""

    file_size: int = 0
    """File size in bytes at scan time."""

    @property
    def display_name(self) -> str:
        """Name shown in file trees."""
        return self.file_name


@dataclass
class Group:
    """Represents a top-level subfolder of the case folder."""

    name: str
    """Group name (first path segment relative to the scan root)."""

    files: list[CsvFileEntry] = field(default_factory=list)
    """CSV files belonging to this group."""

    @property
    def file_count(self) -> int:
        """Number of files in this group."""
        return len(self.files)

    @property
    def total_size(self) -> int:
        """Combined size of all files in this group, in bytes."""
        return sum(entry.file_size for entry in self.files)


@dataclass(frozen=True)
class TimelineEvent:
    """Represents a single row in the merged timeline."""

    timestamp: datetime
    """Event time as a timezone-aware UTC datetime."""

    source: str
    """Name of the CSV file the row came from."""

    group_name: str
    """Group of the source file."""

    description: str
    """Summary built from the row's non-time columns."""

    original_time_string: str
    """The raw timestamp text as it appeared in the file."""


@dataclass(frozen=True)
class FileSkip:
    """Diagnostic record for a file that contributed no events."""

    file_name: str
    reason: str


@dataclass
class FileResult:
    """
    Outcome of processing one CSV file.

    Either a list of events (possibly empty) or a skip reason explaining why
    the file was not used.
    """

    entry: CsvFileEntry
    events: list[TimelineEvent] = field(default_factory=list)
    skip_reason: Optional[str] = None
    bad_records: int = 0  # records the CSV parser could not split

    @property
    def is_skipped(self) -> bool:
        return self.skip_reason is not None

    @classmethod
    def skipped(cls, entry: CsvFileEntry, reason: str) -> "FileResult":
        """Create a result for a file that was skipped entirely."""
        return cls(entry=entry, events=[], skip_reason=reason)


@dataclass
class TimelineReport:
    """Result of a timeline build, with diagnostics about skipped files."""

    events: list[TimelineEvent] = field(default_factory=list)
    """All events, sorted by timestamp ascending."""

    skipped: list[FileSkip] = field(default_factory=list)
    """Files that were skipped, in input order."""

    files_processed: int = 0
    """Number of files that were processed (skipped ones included)."""

    bad_records: int = 0
    """Malformed CSV records dropped across all files."""


def flatten_groups(groups: Iterable[Group]) -> list[CsvFileEntry]:
    """
    Flatten groups into a single file list.

    Files are returned in group order, then in file order within each group,
    which gives the timeline builder a deterministic input order.

    Args:
        groups: Groups as returned by the scanner.

    Returns:
        List of all file entries.
    """
    return [entry for group in groups for entry in group.files]
