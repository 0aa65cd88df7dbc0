"""Masking and wire conversion of DD/MM/YYYY dates"""

import re

_NON_DIGITS = re.compile(r"[^0-9]")

MAX_DIGITS = 8  # DDMMYYYY


def format_date_input(raw: str, previous: str) -> str:
    """
    Re-mask a keystroke-accumulated birthdate as DD/MM/YYYY.

    ``previous`` is the value shown before the keystroke. When the raw input
    is shorter than it the member is deleting and no trailing slash is added
    after the day, so backspace over "15/" is not undone immediately.
    """
    digits = _NON_DIGITS.sub("", raw or "")[:MAX_DIGITS]
    is_deleting = len(raw or "") < len(previous or "")

    if len(digits) >= 4:
        return f"{digits[:2]}/{digits[2:4]}/{digits[4:]}"
    if len(digits) >= 2 and not is_deleting:
        return f"{digits[:2]}/{digits[2:]}"
    return digits


def convert_to_iso_date(masked: str) -> str:
    """DD/MM/YYYY -> YYYY-MM-DD. Field reorder only, day bounds are not checked."""
    day, month, year = masked.split("/")
    return f"{year}-{month}-{day}"


def convert_from_iso_date(iso: str) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY"""
    year, month, day = iso.split("-")
    return f"{day}/{month}/{year}"
