"""
Time column detection.

Artifact exports name their timestamp columns inconsistently
('TimeCreated', 'Last Write Time', 'SourceModified', ...). This module
picks the most likely one from a header row using an ordered pattern list.
"""

from typing import Optional, Sequence


# Matched as substrings of the normalized header name.
TIME_COLUMN_PATTERNS: tuple[str, ...] = (
    "timecreated",
    "timestamp",
    "eventtime",
    "lastwritetime",
    "created",
    "modified",
    "accessed",
)


def normalize_header(name: str) -> str:
    """
    Normalize a header name for pattern matching.

    Lower-cases the name and strips spaces, underscores and hyphens, so that
    'Time_Created', 'time-created' and 'Time Created' all become 'timecreated'.

    Args:
        name: Raw header name.

    Returns:
        The normalized name.
    """
    return name.lower().replace(" ", "").replace("_", "").replace("-", "")


def detect_time_column(
    headers: Sequence[str],
    patterns: Sequence[str] = TIME_COLUMN_PATTERNS
) -> Optional[str]:
    """
    Detect the timestamp column from a CSV header row.

    Headers are examined left to right; the first header whose normalized
    form contains any of the patterns wins, regardless of which pattern it
    matched. Known limitation: names such as 'CreatedBy' also match.

    Args:
        headers: Header names in file order.
        patterns: Substring patterns to look for.

    Returns:
        The original (un-normalized) header name, or None if no header matches.
    """
    for header in headers:
        normalized = normalize_header(header)
        for pattern in patterns:
            if pattern in normalized:
                return header

    return None
