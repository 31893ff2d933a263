"""
Shared normalization rules applied by every engine when mapping a raw
payload into ProductInfo.

- Absent upstream values stay None (never "" or 0)
- http:// image URLs are upgraded to https://
- Repeated entities (authors, allergens...) become ordered lists of strings,
  [] when the field exists but is empty, None when it is absent
"""

from typing import Any, Dict, Iterable, List, Optional


def clean_text(value: Any) -> Optional[str]:
    """Returns the stripped string, or None for absent/blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def secure_url(url: Optional[str]) -> Optional[str]:
    """Upgrades an http:// URL to https://."""
    url = clean_text(url)
    if url is None:
        return None
    if url.lower().startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def flatten_names(values: Optional[Iterable[Any]], key: str = "name") -> Optional[List[str]]:
    """
    Flattens a list of strings or ``{key: ...}`` objects into strings.

    Upstream order is preserved and blank entries are dropped.
    """
    if values is None:
        return None
    if isinstance(values, (str, dict)):
        values = [values]

    names = []
    for item in values:
        if isinstance(item, dict):
            item = item.get(key)
        text = clean_text(item)
        if text is not None:
            names.append(text)
    return names


def first_or_none(values: Optional[Iterable[Any]]) -> Optional[str]:
    if not values:
        return None
    for value in values:
        text = clean_text(value)
        if text is not None:
            return text
    return None


def truncate(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    return value[:limit]


def to_float(value: Any) -> Optional[float]:
    # Open*Facts nutriments come back as numbers or numeric strings
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value: Any) -> Optional[int]:
    number = to_float(value)
    if number is None:
        return None
    return int(number)


def format_grams(value: Any, decimals: int = 1) -> Optional[str]:
    number = to_float(value)
    if number is None:
        return None
    return f"{number:.{decimals}f}g"


def format_kcal(value: Any) -> Optional[str]:
    number = to_float(value)
    if number is None:
        return None
    return f"{int(number)} kcal"


def build_metadata(**values: Any) -> Dict[str, str]:
    """Builds raw_metadata, skipping absent values."""
    metadata = {}
    for key, value in values.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value) if value else None
        text = clean_text(value)
        if text is not None:
            metadata[key] = text
    return metadata
