"""
Barcode format classification.

A raw barcode is annotated with every format it could plausibly be. Tags
overlap on purpose (a 13-digit Bookland code is both ISBN13 and
EAN_GENERIC); engines that can answer for any of them are all tried.
"""

from enum import Enum
from typing import FrozenSet


class FormatTag(str, Enum):
    """Plausible symbologies / numbering schemes for a barcode."""
    ISBN10 = "ISBN10"
    ISBN13 = "ISBN13"
    EAN_GENERIC = "EAN_GENERIC"
    NDC_CANDIDATE = "NDC_CANDIDATE"
    UNKNOWN = "UNKNOWN"


BOOKLAND_PREFIXES = ("978", "979")


def normalize_isbn(raw: str) -> str:
    """Strips hyphens and uppercases (for the ISBN-10 ``X`` check digit)."""
    return raw.replace("-", "").upper()


def digits_only(raw: str) -> str:
    """Projects the barcode onto its digit characters."""
    return "".join(ch for ch in raw if "0" <= ch <= "9")


def is_all_digits(value: str) -> bool:
    # str.isdigit() also accepts superscripts and other Unicode digits
    return bool(value) and all("0" <= ch <= "9" for ch in value)


def is_isbn10(raw: str) -> bool:
    cleaned = normalize_isbn(raw)
    return (
        len(cleaned) == 10
        and is_all_digits(cleaned[:9])
        and (cleaned[9] == "X" or is_all_digits(cleaned[9]))
    )


def is_isbn13(raw: str) -> bool:
    cleaned = normalize_isbn(raw)
    return (
        len(cleaned) == 13
        and is_all_digits(cleaned)
        and cleaned.startswith(BOOKLAND_PREFIXES)
    )


def is_isbn(raw: str) -> bool:
    return is_isbn10(raw) or is_isbn13(raw)


def is_ean_generic(raw: str) -> bool:
    """All digits, 8 to 13 long (EAN-8, UPC-A, EAN-13 ranges)."""
    cleaned = normalize_isbn(raw)
    return is_all_digits(cleaned) and 8 <= len(cleaned) <= 13


def is_ndc_candidate(raw: str) -> bool:
    """Drug codes are often embedded in longer GTINs, so only the digit count matters."""
    return 10 <= len(digits_only(raw)) <= 13


def classify(raw: str) -> FrozenSet[FormatTag]:
    """
    Classifies a raw barcode into its plausible formats.

    Args:
        raw: Barcode as scanned (digits, optionally hyphens or an ISBN ``X``)

    Returns:
        Set of format tags, ``{UNKNOWN}`` when no rule matches
    """
    tags = set()

    if is_isbn10(raw):
        tags.add(FormatTag.ISBN10)
    if is_isbn13(raw):
        tags.add(FormatTag.ISBN13)
    if is_ean_generic(raw):
        tags.add(FormatTag.EAN_GENERIC)
    if is_ndc_candidate(raw):
        tags.add(FormatTag.NDC_CANDIDATE)

    if not tags:
        tags.add(FormatTag.UNKNOWN)

    return frozenset(tags)


def has_valid_check_digit(raw: str) -> bool:
    """
    Validates the check digit of an ISBN-10 or a GTIN (EAN-8, UPC-A, EAN-13).

    Informational only: lookups never reject a barcode on a bad checksum,
    the remote source has the final say.
    """
    cleaned = normalize_isbn(raw)

    if is_isbn10(cleaned):
        total = 0
        for i, ch in enumerate(cleaned):
            value = 10 if ch == "X" else int(ch)
            total += value * (10 - i)
        return total % 11 == 0

    if not is_all_digits(cleaned) or len(cleaned) not in (8, 12, 13):
        return False

    # GTIN: weights 3,1,3,1... from the digit left of the check digit
    check_sum = 0
    for i, digit in enumerate(reversed(cleaned[:-1])):
        weight = 3 if i % 2 == 0 else 1
        check_sum += int(digit) * weight

    calculated_check = (10 - (check_sum % 10)) % 10
    return calculated_check == int(cleaned[-1])
