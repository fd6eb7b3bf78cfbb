"""Validation utilities for file names."""

from __future__ import annotations

# Characters that are not allowed in a file name on Windows or Unix
INVALID_FILE_NAME_CHARS = (
    # Windows
    '"', "*", "<", ">", "?", "|",
    # Unix
    "\0", ":",
)


def is_file_name_valid(name: str) -> bool:
    """Check whether a string can be used as a file name.

    Args:
        name: Candidate file name (a single path component).

    Returns:
        False if name contains any character of INVALID_FILE_NAME_CHARS.

    Example:
        >>> is_file_name_valid("report.txt")
        True
        >>> is_file_name_valid("what?.txt")
        False
    """
    return not any(char in name for char in INVALID_FILE_NAME_CHARS)
