"""
Tests for streaming CSV reading.
"""

import csv

import pytest

from kapeviewer.infrastructure.csv_reader import (
    FIELD_SIZE_LIMIT,
    CsvRecordReader,
    detect_encoding,
    get_csv_headers
)

from conftest import FlakyRecords, write_csv


class TestCsvRecordReader:
    """Test cases for CsvRecordReader."""
    
    def test_reads_header_and_rows(self, tmp_path):
        """Test basic header and row reading."""
        path = write_csv(tmp_path / "a.csv", [["A", "B"], ["1", "2"], ["3", "4"]])
        
        with CsvRecordReader(path) as reader:
            assert reader.headers == ["A", "B"]
            assert list(reader.rows()) == [["1", "2"], ["3", "4"]]
    
    def test_strips_whitespace(self, tmp_path):
        """Test that headers and values are trimmed."""
        path = tmp_path / "ws.csv"
        path.write_text(" Time Created , Value \n 2024 ,  x  \n")
        
        with CsvRecordReader(path) as reader:
            assert reader.headers == ["Time Created", "Value"]
            assert list(reader.rows()) == [["2024", "x"]]
    
    def test_skips_blank_lines(self, tmp_path):
        """Test that blank lines before the header and between rows are ignored."""
        path = tmp_path / "blank.csv"
        path.write_text("\nA,B\n\n1,2\n\n")
        
        with CsvRecordReader(path) as reader:
            assert reader.headers == ["A", "B"]
            assert list(reader.rows()) == [["1", "2"]]
    
    def test_quoted_fields(self, tmp_path):
        """Test that quoted fields with commas and newlines are kept intact."""
        path = write_csv(tmp_path / "q.csv", [["A", "B"], ["x, y", "line1\nline2"]])
        
        with CsvRecordReader(path) as reader:
            assert list(reader.rows()) == [["x, y", "line1\nline2"]]
    
    def test_utf8_bom_removed(self, tmp_path):
        """Test that a UTF-8 byte order mark does not leak into the first header."""
        path = write_csv(tmp_path / "bom.csv", [["TimeCreated", "B"], ["1", "2"]], encoding="utf-8-sig")
        
        with CsvRecordReader(path) as reader:
            assert reader.headers[0] == "TimeCreated"
    
    def test_utf16(self, tmp_path):
        """Test that UTF-16 files with a BOM are decoded."""
        path = write_csv(tmp_path / "wide.csv", [["Timestamp", "Name"], ["1", "ü"]], encoding="utf-16")
        
        assert detect_encoding(path) == "utf-16"
        with CsvRecordReader(path) as reader:
            assert reader.headers == ["Timestamp", "Name"]
            assert list(reader.rows()) == [["1", "ü"]]
    
    def test_invalid_utf8_replaced(self, tmp_path):
        """Test that undecodable bytes do not abort reading."""
        path = tmp_path / "latin.csv"
        path.write_bytes(b"Name,Value\ncaf\xe9,1\n")
        
        with CsvRecordReader(path) as reader:
            rows = list(reader.rows())
        
        assert rows[0][1] == "1"
    
    def test_empty_file(self, tmp_path):
        """Test that an empty file has no headers and no rows."""
        path = tmp_path / "empty.csv"
        path.write_text("")
        
        with CsvRecordReader(path) as reader:
            assert reader.headers == []
            assert list(reader.rows()) == []
    
    def test_field_larger_than_csv_default_limit(self, tmp_path):
        """Test that fields past the csv module's 128 KiB default are read."""
        big = "x" * 200_000
        path = write_csv(tmp_path / "big.csv", [["A", "B"], ["1", big], ["2", "small"]])
        
        with CsvRecordReader(path) as reader:
            rows = list(reader.rows())
        
        assert rows == [["1", big], ["2", "small"]]
        assert reader.bad_records == 0
        assert csv.field_size_limit() == FIELD_SIZE_LIMIT
    
    def test_malformed_records_counted(self, tmp_path):
        """Test that records the csv module rejects are counted and skipped."""
        path = write_csv(tmp_path / "a.csv", [["A"]])
        
        with CsvRecordReader(path) as reader:
            reader._reader = FlakyRecords([["1"], csv.Error("bad record"), ["2"]])
            rows = list(reader.rows())
        
        assert rows == [["1"], ["2"]]
        assert reader.bad_records == 1
    
    def test_missing_file_raises(self, tmp_path):
        """Test that opening a missing file raises."""
        with pytest.raises(FileNotFoundError):
            with CsvRecordReader(tmp_path / "missing.csv"):
                pass


class TestGetCsvHeaders:
    """Tests for get_csv_headers."""
    
    def test_headers(self, case_folder):
        """Test reading only the header row."""
        headers = get_csv_headers(case_folder / "Registry" / "RECmd.csv")
        
        assert headers == ["Key Path", "Last Write Time"]
    
    def test_missing_file(self, tmp_path):
        """Test that a missing file yields no headers."""
        assert get_csv_headers(tmp_path / "missing.csv") == []
