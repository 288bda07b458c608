"""
Pytest configuration and shared fixtures.

This file contains pytest configuration and reusable test fixtures.
"""

import csv
from pathlib import Path

import pytest

from kapeviewer.core.models import CsvFileEntry


def write_csv(path: Path, rows: list[list[str]], encoding: str = "utf-8") -> Path:
    """Write rows (header first) to a CSV file, creating parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding=encoding, newline="") as f:
        csv.writer(f).writerows(rows)
    return path


def make_entry(path: Path, group_name: str = "Test") -> CsvFileEntry:
    """Create a CsvFileEntry for a path without scanning."""
    try:
        size = path.stat().st_size if path.is_file() else 0
    except OSError:
        size = 0
    return CsvFileEntry(
        file_name=path.name,
        full_path=path,
        group_name=group_name,
        file_size=size
    )


class FlakyRecords:
    """Stand-in for a csv reader that raises the exceptions found among its items."""

    def __init__(self, items):
        self._items = list(items)

    def __iter__(self):
        return self

    def __next__(self):
        if not self._items:
            raise StopIteration
        item = self._items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def case_folder(tmp_path) -> Path:
    """
    Create a small case folder with three groups.

    Layout:
        EvtxECmd/EventLogs.csv   TimeCreated column, 2 usable rows of 4
        Registry/RECmd.csv       Last Write Time column, 2 usable rows
        notes.csv                no time column (group 'Other')
        readme.txt               not a CSV

    Returns:
        Path to the case folder.
    """
    root = tmp_path / "case"

    write_csv(root / "EvtxECmd" / "EventLogs.csv", [
        ["RecordNumber", "TimeCreated", "EventId", "Computer"],
        ["1", "2024-01-15T10:30:00Z", "4624", "HOST01"],
        ["2", "2024-01-15T08:00:00Z", "4625", "HOST01"],
        ["3", "", "4634", "HOST01"],
        ["4", "garbage", "1102", "HOST01"],
    ])

    write_csv(root / "Registry" / "RECmd.csv", [
        ["Key Path", "Last Write Time"],
        ["HKLM\\Software\\Acme", "2024-01-15 09:00:00"],
        ["HKCU\\Software\\Run", "1705315800"],
    ])

    write_csv(root / "notes.csv", [
        ["Name", "Value"],
        ["analyst", "jdoe"],
    ])

    (root / "readme.txt").write_text("not a csv")

    return root
