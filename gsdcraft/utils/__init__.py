"""Shared utility helpers for gsdcraft."""

import re
from typing import Any, List, Optional, Tuple

# GSDML number attributes are decimal, but vendor files also use 0x-prefixed hex
_INT_PATTERN = re.compile(r"[+-]?(0[xX][0-9a-fA-F]+|\d+)")


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse a GSDML integer attribute (decimal or ``0x`` hex).

    Returns None when the text is missing or not an integer.
    """
    if text is None:
        return None
    clean = text.strip()
    if not _INT_PATTERN.fullmatch(clean):
        return None
    return int(clean, 0) if clean.lstrip("+-").lower().startswith("0x") else int(clean, 10)


def parse_value_range(text: str) -> List[Tuple[int, int]]:
    """Parse GSDML ``AllowedValues`` notation into ``(min, max)`` segments.

    Accepts ``"0..255"``, ``"1 3 5"`` and mixes such as ``"0..3 7 10..12"``.

    Raises:
        ValueError: If notation is empty or invalid.
    """
    if not text or not text.strip():
        raise ValueError("Empty allowed values notation")

    segments = []
    for token in text.split():
        if ".." in token:
            low_str, _, high_str = token.partition("..")
            low, high = parse_int(low_str), parse_int(high_str)
            if low is None or high is None:
                raise ValueError(f"Invalid allowed values range: '{token}'")
            if high < low:
                raise ValueError(f"Invalid allowed values range '{token}': max must be >= min")
            segments.append((low, high))
        else:
            value = parse_int(token)
            if value is None:
                raise ValueError(f"Invalid allowed value: '{token}'")
            segments.append((value, value))
    return segments


def canonical_raw_code(value: Any) -> str:
    """Normalize a raw value or assignment ``Content`` for mapping lookups.

    ``True``/``False`` become ``"1"``/``"0"`` and integer-like strings lose
    hex prefixes and leading zeros, so ``"0x01"``, ``"1"`` and ``1`` all
    compare equal.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    number = parse_int(text)
    return str(number) if number is not None else text


def filter_none(data: dict) -> dict:
    """Remove keys with None values from a dictionary.

    Required for Pydantic v2 compatibility: passing None explicitly
    to fields with defaults causes validation errors. Filtering None
    values lets Pydantic use its own defaults.
    """
    return {k: v for k, v in data.items() if v is not None}


def hex_dump(data: Optional[bytes]) -> str:
    """Render bytes as ``12-34-AB`` for log output."""
    if data is None:
        return "<none>"
    return "-".join(f"{b:02X}" for b in data)
