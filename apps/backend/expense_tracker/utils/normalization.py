"""
Text normalization helpers

Descriptions are stored as typed (trimmed, inner whitespace collapsed);
category labels are compared case- and width-insensitively.
"""

import re
import unicodedata


def normalize_description(value: str | None) -> str:
    """
    Trim a free-text description.

    - leading/trailing whitespace removed
    - runs of inner whitespace collapsed to one space

    Example:
        >>> normalize_description("  Netflix   subscription ")
        "Netflix subscription"
        >>> normalize_description("   ")
        ""
    """
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def normalize_label(value: str | None) -> str:
    """
    Comparison key for category names.

    - NFKC normalization (full-width forms folded)
    - casefold
    - whitespace removed

    Example:
        >>> normalize_label(" Other ")
        "other"
        >>> normalize_label("ＯＴＨＥＲ")
        "other"
    """
    if not value:
        return ""
    normalized = unicodedata.normalize("NFKC", value).casefold()
    return re.sub(r"\s+", "", normalized)
