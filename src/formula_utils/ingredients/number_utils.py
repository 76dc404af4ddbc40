import math
from fractions import Fraction
from typing import Any, Optional


def _is_integer(text: str) -> bool:
    """Check if a string represents a valid integer."""
    try:
        int(text)
        return True
    except ValueError:
        return False


def _is_number(text: str) -> bool:
    """Check if a string represents a valid number (int or float)."""
    try:
        float(text)
        return True
    except ValueError:
        return False


def _is_fraction(text: str) -> bool:
    """Check if a string represents a valid fraction (e.g., '1/2')."""
    if "/" not in text:
        return False
    parts = text.split("/")
    return len(parts) == 2 and all(_is_integer(part.strip()) for part in parts)


def _parse_fraction(text: str) -> float:
    """Parse a fraction string (e.g., '1/2') into a float."""
    if "/" not in text:
        raise ValueError(f"Not a fraction: {text}")

    numerator_str, denominator_str = text.split("/")
    denominator = int(denominator_str)

    if denominator == 0:
        raise ZeroDivisionError("Division by zero in fraction")

    return float(Fraction(int(numerator_str), denominator))


def coerce_number(value: Any) -> Optional[float]:
    """Coerce a loosely typed CMS value into a nonnegative float.

    Accepts ints, floats, numeric strings and fraction strings. Anything
    else, including booleans, NaN, infinities and negative numbers, is
    treated as missing.

    Args:
        value: Raw field value

    Returns:
        The numeric value, or None if the value is not a usable number

    Examples:
        >>> coerce_number("12.5")
        12.5
        >>> coerce_number("1/2")
        0.5
        >>> coerce_number("a pinch") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if _is_number(text):
            number = float(text)
        elif _is_fraction(text):
            try:
                number = _parse_fraction(text)
            except ZeroDivisionError:
                return None
        else:
            return None
    else:
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return number
