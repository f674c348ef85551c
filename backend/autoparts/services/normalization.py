"""
Text helpers shared by the catalog filters and the CSV importer.
"""

from collections.abc import Iterable

# Turkish letters folded to their ASCII counterparts when normalizing headers
TURKISH_TRANSLITERATION = str.maketrans({
    "ç": "c",
    "ğ": "g",
    "ı": "i",
    "ö": "o",
    "ş": "s",
    "ü": "u",
    "\u0307": None,  # "İ".lower() leaves a combining dot after the i
})

HEADER_STRIP_CHARS = str.maketrans("", "", " _-.")


def clean_text(value: str | None) -> str | None:
    """Return the trimmed value, or None when it is missing or blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def fold_case(value: str) -> str:
    """Case-insensitive comparison key."""
    return value.casefold()


def contains_ci(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test. A missing haystack never matches."""
    if haystack is None:
        return False
    return fold_case(needle) in fold_case(haystack)


def casefold_set(values: Iterable[str | None] | None) -> set[str]:
    """
    Build a case-insensitive membership set.

    Blank entries are dropped, the rest are trimmed and case-folded.
    """
    result: set[str] = set()
    for value in values or ():
        cleaned = clean_text(value)
        if cleaned is not None:
            result.add(fold_case(cleaned))
    return result


def merge_single_and_list(
    single: str | None,
    values: Iterable[str | None] | None,
) -> list[str]:
    """
    Combine a scalar query parameter with its list form.

    Blank entries are dropped; order of first appearance is kept so the
    result can be echoed back to callers.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for value in [*(values or ()), single]:
        cleaned = clean_text(value)
        if cleaned is None:
            continue
        key = fold_case(cleaned)
        if key not in seen:
            seen.add(key)
            merged.append(cleaned)
    return merged


def positive_years(single: int | None, values: Iterable[int] | None) -> set[int]:
    """Combine scalar and list year parameters, dropping non-positive values."""
    years = {y for y in values or () if y > 0}
    if single is not None and single > 0:
        years.add(single)
    return years


def normalize_header(value: str) -> str:
    """
    Canonical form of a CSV column header.

    Trims, lowercases, removes spaces, underscores, hyphens and periods, then
    folds Turkish letters to ASCII. ``"Başlangıç Yılı"`` becomes
    ``"baslangicyili"``.
    """
    value = value.strip().lower()
    value = value.translate(HEADER_STRIP_CHARS)
    return value.translate(TURKISH_TRANSLITERATION)
