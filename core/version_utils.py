"""
Utility functions for normalizing library versions reported by probes.
"""
import math
import numbers
from decimal import Decimal
from typing import Any, Optional


def format_number(value: float) -> str:
    """
    Render a number the way a JavaScript engine stringifies it.

    Uses the shortest round-tripping digits, fixed notation for magnitudes in
    [1e-7, 1e21) and exponent notation outside it.

    Examples:
        - 3 -> "3"
        - 3.0 -> "3"
        - 1.5 -> "1.5"
        - 1e21 -> "1e+21"
        - 1e-7 -> "1e-7"
        - float("nan") -> "NaN"

    Args:
        value: An int or float

    Returns:
        Decimal string form of the number
    """
    if isinstance(value, numbers.Integral) and abs(int(value)) < 10 ** 21:
        return str(int(value))
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr() gives the shortest digits that round-trip, as JS does
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k  # position of the decimal point relative to the digits

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def normalize_version(version: Any) -> Optional[str]:
    """
    Normalize a probe's version field to a string or None.

    Examples:
        - "3.6.0" -> "3.6.0"
        - 3 -> "3"
        - "" -> None
        - None -> None

    Args:
        version: Raw version value from a probe result

    Returns:
        Normalized version or None
    """
    # bool is an Integral too, but a boolean version carries no number
    if isinstance(version, bool):
        return None
    if isinstance(version, numbers.Real):
        return format_number(version)
    if isinstance(version, str):
        return version or None
    return None
