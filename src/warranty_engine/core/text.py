"""
Text normalization helpers.
Turns raw CSV field values into clean, matchable strings.
"""

import re
import unicodedata

CONTROL_CHARS_PATTERN = re.compile(r"[\u0000-\u001F\u007F-\u009F]")
WHITESPACE_PATTERN = re.compile(r"\s+")


def sanitize_text(value: str | int | float | None) -> str:
    """
    Normalize a raw field value into a single-line string.

    Applies NFKC normalization, strips C0/C1 control characters and
    collapses whitespace runs into a single space.

    Args:
        value: Raw value from a CSV cell (or None)

    Returns:
        The sanitized string, or "" for None
    """
    if value is None:
        return ""

    normalized = unicodedata.normalize("NFKC", str(value))
    without_controls = CONTROL_CHARS_PATTERN.sub("", normalized)
    return WHITESPACE_PATTERN.sub(" ", without_controls).strip()


def normalize_for_match(value: str | int | float | None) -> str:
    """Sanitize and lower-case a value for keyword matching."""
    return sanitize_text(value).lower()
