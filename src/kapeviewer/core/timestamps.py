"""
Timestamp parsing for heterogeneous artifact exports.

Values are tried against several strategies in a fixed order, stopping at
the first success:

1. Offset-aware parse (ISO 8601, RFC 2822 and a few offset-bearing layouts).
   Only values that carry an explicit offset or zone are accepted here; they
   are converted to UTC using that offset.
2. Unix epoch integers above EPOCH_FLOOR, as seconds, then as milliseconds.
3. Exact match against EXPLICIT_FORMATS. These values carry no zone and are
   taken to already be UTC wall-clock time; no conversion is applied.
4. A lenient parse through pandas, assuming UTC for naive values.

All results are timezone-aware datetimes in UTC. parse_timestamp never
raises; it returns None when every strategy fails.
"""

import re
import warnings
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import pandas as pd


EPOCH_FLOOR = 1_000_000_000
"""Integers at or below this value are not treated as epoch timestamps."""

MAX_EPOCH_DIGITS = 19
"""Longer digit strings are out of datetime range in any unit and are not converted."""

# Offset-bearing layouts not covered by datetime.fromisoformat.
OFFSET_AWARE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S.%f %z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y/%m/%d %H:%M:%S %z",
    "%m/%d/%Y %H:%M:%S %z",
    "%m/%d/%Y %I:%M:%S %p %z",
)

# Zone-less layouts, interpreted as UTC. Order matters: US month-first
# layouts win over European day-first ones for ambiguous dates.
EXPLICIT_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %I:%M:%S %p",
    "%Y/%m/%d %H:%M:%S",
)

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_INTEGER_RE = re.compile(r"^[+-]?\d{1,%d}$" % MAX_EPOCH_DIGITS)
_DIGIT_RUN_RE = re.compile(r"\d+")

# Words pandas resolves against the current clock rather than the value.
_RELATIVE_WORDS = frozenset({"now", "today", "yesterday", "tomorrow"})


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a raw timestamp field into a UTC datetime.

    Args:
        value: The raw field text.

    Returns:
        A timezone-aware UTC datetime, or None if the value cannot be parsed.
    """
    if value is None:
        return None

    text = value.strip()
    if not text:
        return None

    for strategy in (_parse_offset_aware, _parse_epoch, _parse_explicit, _parse_lenient):
        parsed = strategy(text)
        if parsed is not None:
            return parsed

    return None


def _parse_offset_aware(text: str) -> Optional[datetime]:
    """Parse values carrying an explicit UTC offset or 'Z' designator."""
    parsed = None

    # fromisoformat only learned to read 'Z' in Python 3.11
    iso_text = text[:-1] + "+00:00" if text[-1] in "Zz" else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        pass

    if parsed is None:
        for fmt in OFFSET_AWARE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError, OverflowError):
            pass

    if parsed is None or parsed.tzinfo is None:
        return None

    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def _parse_epoch(text: str) -> Optional[datetime]:
    """Interpret large integers as epoch seconds, falling back to milliseconds."""
    if not _INTEGER_RE.match(text):
        return None

    number = int(text)
    if number <= EPOCH_FLOOR:
        return None

    try:
        return _UNIX_EPOCH + timedelta(seconds=number)
    except OverflowError:
        pass

    try:
        return _UNIX_EPOCH + timedelta(milliseconds=number)
    except OverflowError:
        return None


def _parse_explicit(text: str) -> Optional[datetime]:
    """Exact-match the zone-less format table; results are taken as UTC."""
    for fmt in EXPLICIT_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def _parse_lenient(text: str) -> Optional[datetime]:
    """Last resort: let pandas guess, assuming UTC for naive values."""
    if not _has_date_and_time_parts(text):
        return None

    with warnings.catch_warnings():
        # pandas warns when it has to fall back to per-element guessing
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, utc=True)
        except (ValueError, TypeError, OverflowError):
            return None

        if pd.isna(parsed):
            return None

        return parsed.to_pydatetime().astimezone(timezone.utc)


def _has_date_and_time_parts(text: str) -> bool:
    """
    Check that a value is specific enough for the lenient parse.

    pandas happily expands partial values such as '2024' or 'March' to a
    default day, and resolves words like 'now' against the wall clock. A
    value must have a time of day or at least two numeric parts to be
    considered a point in time.
    """
    if text.casefold() in _RELATIVE_WORDS:
        return False

    digit_runs = _DIGIT_RUN_RE.findall(text)
    if not digit_runs:
        return False

    return ":" in text or len(digit_runs) >= 2
