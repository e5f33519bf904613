"""Lenient integer parsing for query parameters and stored values."""

from typing import Any


def parse_int(value: Any) -> int | None:
    """
    Parse an integer, returning None instead of raising.

    Accepts ints, integral floats and strings of digits with an optional
    sign and surrounding whitespace. Anything else (``"abc"``, ``"12abc"``,
    ``""``, booleans, NaN) yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        # int() would also accept "1_000"
        if not text or "_" in text:
            return None
        try:
            return int(text, 10)
        except ValueError:
            return None
    return None


def parse_non_negative_int(value: Any) -> int | None:
    """Like ``parse_int`` but also rejects negative values."""
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        return None
    return parsed
