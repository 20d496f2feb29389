# licensemap/core/normalizers.py

"""
Text and value normalization shared by every matcher.

Ensures consistent comparison regardless of how an inventory spells a name.
"""

from typing import Any
import math
import re

_NON_ALNUM = re.compile(r'[^a-z0-9]')
_WHITESPACE = re.compile(r'\s+')


def normalize_name(name: str | None) -> str:
    """
    Normalize an application or vendor name for comparison.

    - Lowercase
    - Every non-alphanumeric character becomes a space
    - Collapse whitespace and trim

    Idempotent: normalize_name(normalize_name(x)) == normalize_name(x).
    """
    if not name:
        return ""

    s = str(name).lower()
    s = _NON_ALNUM.sub(' ', s)
    s = _WHITESPACE.sub(' ', s).strip()
    return s


def tokenize(normalized: str) -> set[str]:
    """Word set of a normalized name, ignoring one-character tokens."""
    return {word for word in normalized.split(' ') if len(word) > 1}


def normalize_amount(amount: Any) -> float:
    """
    Normalize a charge or quantity to float.

    Handles:
    - Integers and floats (NaN becomes 0)
    - Strings with currency symbols and thousands separators
    - Anything unparseable becomes 0
    """
    if amount is None or isinstance(amount, bool):
        return 0.0

    if isinstance(amount, (int, float)):
        value = float(amount)
        return 0.0 if math.isnan(value) or math.isinf(value) else value

    if isinstance(amount, str):
        # Remove currency symbols and commas
        cleaned = re.sub(r'[^\d.-]', '', amount)
        try:
            return float(cleaned)
        except ValueError:
            return 0.0

    return 0.0


def is_blank(value: Any) -> bool:
    """True for None and for values whose text is empty after trimming."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


def field_text(record: dict, field: str) -> str:
    """Field value as text, with None mapped to the empty string."""
    value = record.get(field)
    if value is None:
        return ""
    return str(value)
