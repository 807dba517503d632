"""Canonical forms of the identifiers that make up an inventory key.

Sizes, colors and articles reach the ledger from manual entry, bulk import and
legacy rows, each with its own spelling. Every aggregation and every check
goes through these functions so that one variant is never split across
several keys. None of them raise.
"""

import math
import re
from numbers import Integral, Real

from stockledger.config import settings

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Cyrillic capitals that are visually identical to Latin ones
_HOMOGLYPHS = str.maketrans({
    "А": "A", "В": "B", "С": "C", "Е": "E", "Н": "H", "К": "K",
    "М": "M", "О": "O", "Р": "P", "Т": "T", "Х": "X",
})
_FOLDABLE = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ") | set("АВСЕНКМОРТХ")


def normalize_color_id(raw) -> int | None:
    """Return a positive color id, or None for "no color".

    None, 0, "0", negatives, booleans and anything non-numeric all mean no
    color. Strings are read by their leading integer, so "7" and "7 " give 7.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Integral):
        value = int(raw)
    elif isinstance(raw, Real):
        if not math.isfinite(raw) or not float(raw).is_integer():
            return None
        value = int(raw)
    elif isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        if not match:
            return None
        value = int(match.group(1))
    else:
        return None
    return value if value > 0 else None


def extract_size_number(size_code: str | None) -> str:
    """ "92 - 2 года" -> "92", "M" -> "M". """
    if not size_code:
        return ""
    return size_code.strip().split(" ")[0].strip()


def _fold_homoglyphs(text: str) -> str:
    letters = [ch for ch in text if ch.isalpha()]
    if letters and all(ch in _FOLDABLE for ch in letters):
        return text.translate(_HOMOGLYPHS)
    return text


def normalize_size_code(raw: str | None, article: str | None = None) -> str:
    """Canonical size label.

    Growth-banded labels ("M 170") are kept whole; anything else is cut to its
    leading token, which drops age annotations such as "98 - 3 года". The
    growth-banded set is recognised for every article because older rows were
    written without one; ``article`` is accepted so call sites can pass it.
    Non-string labels (an int 92 from a bulk import) are read as text.
    """
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)
    trimmed = " ".join(raw.split())
    if not trimmed:
        return ""
    folded = _fold_homoglyphs(trimmed)
    if folded in settings.GROWTH_BANDED_SIZES:
        return folded
    return _fold_homoglyphs(extract_size_number(trimmed))


def normalize_article(raw: str) -> str:
    """Upper-case a leading lowercase Latin letter, leave the rest alone."""
    if not raw or not isinstance(raw, str):
        return raw
    trimmed = raw.strip()
    if not trimmed:
        return raw
    first = trimmed[0]
    if "a" <= first <= "z":
        return first.upper() + trimmed[1:]
    return trimmed


def format_article(raw: str | None) -> str:
    """Display form: purely numeric articles get an "L" prefix ("021" -> "L021")."""
    if not raw:
        return ""
    if raw.isascii() and raw.isdigit():
        return f"L{raw}"
    return raw


def size_search_variants(raw: str) -> list[str]:
    """Spellings under which a size may have been stored by older code paths."""
    normalized = raw.strip()
    variants = [normalized]
    if normalized == "М":
        variants.append("M")
    elif normalized == "M":
        variants.append("М")
    if "/" in normalized:
        base = normalized.split("/")[0]
        if base and base not in variants:
            variants.append(base)
    return variants
