"""
Tests for core domain models.

These tests verify the behavior of data models in the core package.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from pathlib import Path

import pytest

from kapeviewer.core.models import (
    CsvFileEntry,
    FileResult,
    Group,
    TimelineEvent,
    flatten_groups
)


def _entry(name, group="G", size=10):
    return CsvFileEntry(file_name=name, full_path=Path("/case") / group / name,
                        group_name=group, file_size=size)


class TestCsvFileEntry:
    """Tests for CsvFileEntry model."""
    
    def test_display_name(self):
        """Test that the display name is the file name."""
        assert _entry("a.csv").display_name == "a.csv"
    
    def test_immutable(self):
        """Test that entries cannot be modified after creation."""
        entry = _entry("a.csv")
        
        with pytest.raises(FrozenInstanceError):
            entry.file_name = "b.csv"


class TestGroup:
    """Tests for Group model."""
    
    def test_counts(self):
        """Test file count and total size."""
        group = Group(name="G", files=[_entry("a.csv", size=5), _entry("b.csv", size=7)])
        
        assert group.file_count == 2
        assert group.total_size == 12
    
    def test_empty_group(self):
        """Test a group without files."""
        assert Group(name="G").file_count == 0
        assert Group(name="G").total_size == 0


class TestTimelineEvent:
    """Tests for TimelineEvent model."""
    
    def test_immutable(self):
        """Test that events cannot be modified after creation."""
        event = TimelineEvent(
            timestamp=datetime(2024, 1, 15, tzinfo=timezone.utc),
            source="a.csv",
            group_name="G",
            description="",
            original_time_string="2024-01-15"
        )
        
        with pytest.raises(FrozenInstanceError):
            event.description = "changed"


class TestFileResult:
    """Tests for FileResult model."""
    
    def test_success_is_not_skipped(self):
        """Test a successful result."""
        assert not FileResult(entry=_entry("a.csv")).is_skipped
    
    def test_skipped(self):
        """Test a skipped result."""
        result = FileResult.skipped(_entry("a.csv"), "no time column")
        
        assert result.is_skipped
        assert result.events == []
        assert result.skip_reason == "no time column"


def test_flatten_groups_keeps_order():
    """Test that flattening keeps group order, then file order."""
    groups = [
        Group(name="A", files=[_entry("2.csv", "A"), _entry("1.csv", "A")]),
        Group(name="B", files=[_entry("3.csv", "B")]),
    ]
    
    assert [e.file_name for e in flatten_groups(groups)] == ["2.csv", "1.csv", "3.csv"]
