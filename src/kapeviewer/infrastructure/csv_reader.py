"""
CSV file reading utilities.

Artifact exports can be large, so files are streamed row by row rather than
loaded whole. Header names and field values are stripped of surrounding
whitespace, blank lines are skipped, and malformed records are skipped
without aborting the rest of the file.
"""

import codecs
import csv
import sys
from pathlib import Path
from typing import Iterator, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


def raise_field_size_limit() -> int:
    """
    Lift the csv module's per-field size cap as far as the platform allows.

    Exported artifacts routinely hold fields (script blocks, payloads) well
    past the 128 KiB default, which would otherwise fail the whole record.

    Returns:
        The limit now in effect.
    """
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            # C long is 32-bit on Windows
            limit //= 2


FIELD_SIZE_LIMIT = raise_field_size_limit()


def detect_encoding(file_path: Path) -> str:
    """
    Pick a text encoding from the file's byte order mark.

    Args:
        file_path: Path to the CSV file.

    Returns:
        'utf-16' when a UTF-16 BOM is present, otherwise 'utf-8-sig'
        (which also reads plain UTF-8 without a BOM).
    """
    with open(file_path, 'rb') as f:
        head = f.read(4)

    if head.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return 'utf-16'
    return 'utf-8-sig'


class CsvRecordReader:
    """
    Streaming reader for a single CSV file.

    Use as a context manager; the header row is read on entry and data rows
    are pulled lazily through rows().

    Example:
        with CsvRecordReader(path) as reader:
            for row in reader.rows():
                ...
    """

    def __init__(self, file_path: Path):
        """
        Initialize the reader.

        Args:
            file_path: Path to the CSV file.
        """
        self.file_path = Path(file_path)
        self.headers: list[str] = []
        self.bad_records = 0
        self._file = None
        self._reader: Optional[Iterator[list[str]]] = None

    def __enter__(self) -> "CsvRecordReader":
        encoding = detect_encoding(self.file_path)
        self._file = open(self.file_path, 'r', encoding=encoding, errors='replace', newline='')
        try:
            self._reader = csv.reader(self._file)
            self.headers = self._read_header()
        except Exception:
            self._file.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _read_header(self) -> list[str]:
        """Read the first non-blank record as the header row."""
        for record in self._reader:
            if record:
                return [name.strip() for name in record]
        return []

    def rows(self) -> Iterator[list[str]]:
        """
        Yield the remaining data rows with stripped values.

        Records the csv module cannot parse are counted in bad_records and
        skipped.

        Yields:
            List of field values for each non-blank row.
        """
        while True:
            try:
                record = next(self._reader)
            except StopIteration:
                return
            except csv.Error as e:
                self.bad_records += 1
                logger.debug(f"Skipping malformed record in {self.file_path.name}: {e}")
                continue

            if not record:
                continue

            yield [value.strip() for value in record]


def get_csv_headers(file_path: Path) -> list[str]:
    """
    Get the column headers from a CSV file without reading the data rows.

    Args:
        file_path: Path to the CSV file.

    Returns:
        List of column names, or empty list if the file cannot be read.
    """
    try:
        with CsvRecordReader(file_path) as reader:
            return reader.headers
    except (OSError, UnicodeError, csv.Error) as e:
        logger.error(f"Failed to read CSV headers from {file_path}: {e}")
        return []
