"""Text input filters.

Each filter returns the accepted (possibly normalised) text, or None when the
input is invalid. Callers decide what to do with rejected input.
"""

from __future__ import annotations


def filter_positive_integer(text: str) -> str | None:
    """Accept "" or a positive integer; "007" normalises to "7".

    Zero, negatives, decimals and non-digits are rejected.
    """
    if text == "":
        return ""
    if not text.isascii() or not text.isdigit():
        return None
    value = int(text)
    if value <= 0:
        return None
    return str(value)
