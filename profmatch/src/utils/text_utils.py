"""
ProfMatch - Text Utilities
===========================
Helpers for normalising query text and defensively reading the loosely
typed metadata attached to index rows.

Index metadata is untyped: ratings may arrive as ``"4.5"`` or ``4.5``,
keywords as a list, a single string, or not at all.  These helpers
never raise on bad input; they fall back to the caller's default.
These utilities are consumed primarily by the ranker and the prompt
assembler and should remain stateless and side-effect-free.
"""

from __future__ import annotations

import math
import re
import unicodedata
from collections.abc import Iterable

# Matches control characters (C0/C1) and zero-width / formatting marks.
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\u200b\u200c\u200d\u200e\u200f\u00ad\u2060\ufffe]")
_WHITESPACE_RE = re.compile(r"\s+")

MISSING = "N/A"


def clean_query(text: str) -> str:
    """
    Normalise a user query before embedding.

    Steps:
        1. Unicode NFC normalisation.
        2. Strip non-printable / zero-width characters.
        3. Collapse all whitespace runs to a single space and trim.
    """
    text = unicodedata.normalize("NFC", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_number(value: object, default: float) -> float:
    """
    Read a numeric metadata field, returning *default* when it is absent
    or cannot be read as a finite number.

    Examples::

        parse_number(4.5, 0.0)     → 4.5
        parse_number("3", 0.0)     → 3.0
        parse_number(" 2.5 ", 0.0) → 2.5
        parse_number("hard", 3.0)  → 3.0
        parse_number(None, 3.0)    → 3.0
        parse_number(True, 0.0)    → 0.0
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def as_keyword_list(value: object) -> list[str]:
    """
    Coerce a ``keywords`` metadata field into a list of non-blank strings.

    A bare string counts as a single keyword; non-string items and
    blank entries are dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, Iterable):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def display_value(value: object) -> str:
    """Render a metadata field for the prompt, ``N/A`` when absent or blank."""
    if value is None:
        return MISSING
    text = str(value).strip()
    return text if text else MISSING
