"""Conversion of numeric results into bounded display strings."""

import math
import re
from decimal import ROUND_HALF_UP, Decimal

ERROR_TEXT = "Error"

# Decimal places kept before display, absorbs binary representation error
ROUNDING_PLACES = 10

EXPONENTIAL_DIGITS = 6

# Shortest renderings switch to exponent form below 1e-6
SMALL_EXPONENT = -6

_UNSAFE_CHARS = re.compile(r"[<>\"'&\x00-\x08\x0b\x0c\x0e-\x1f]")


def format_result(result: float, max_digits: int) -> str:
    """
    Format a calculation result for a display holding max_digits digits.

    The steps run in a fixed order: non-finite values become ``"Error"``,
    magnitudes at or above ``10**max_digits`` switch to exponential
    notation, everything else is rounded half up to ten places and
    printed with its shortest digits (exponent form below ``1e-6``).
    Only when that rendering is longer than the budget are the
    fractional digits cut back, rounding ties away from zero.

    Args:
        result: The value to format
        max_digits: The precision budget (8, 10, 12 or 15)

    Returns:
        The display string

    Example:
        >>> format_result(0.1 + 0.2, 12)
        '0.3'
        >>> format_result(1.23456e20, 12)
        '1.234560e+20'
        >>> format_result(2 / 3, 8)
        '0.6666667'
        >>> format_result(1 / 30000000, 8)
        '3.33e-8'
    """
    if not math.isfinite(result):
        return ERROR_TEXT

    if abs(result) >= 10**max_digits:
        return _exponential(result)

    scale = 10**ROUNDING_PLACES
    rounded = _round_half_up(result * scale) / scale
    formatted = _strip_zeros(_shortest(rounded))

    if len(formatted) > max_digits:
        integer_part = str(int(abs(rounded)))
        available = max_digits - len(integer_part)
        if available > 0:
            formatted = _strip_zeros(_fixed(rounded, available))
        else:
            formatted = str(_round_half_up(rounded))

    # Truncation can leave "-0" behind for tiny negative values
    if formatted == "-0":
        return "0"
    return formatted


def _round_half_up(value: float) -> int:
    """Nearest integer, halves going towards positive infinity."""
    whole = math.floor(value)
    return whole + 1 if value - whole >= 0.5 else whole


def _exponential(value: float) -> str:
    mantissa, exponent = f"{value:.{EXPONENTIAL_DIGITS}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def _shortest(value: float) -> str:
    """Shortest round-tripping digits of value, e.g. '0.25', '120', '3.33e-8'."""
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digits, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    # Position of the decimal point relative to the first digit
    point = len(digits) + exponent

    if point >= len(digits):
        return f"{sign}{text}{'0' * (point - len(digits))}"
    if point > 0:
        return f"{sign}{text[:point]}.{text[point:]}"
    if point > SMALL_EXPONENT:
        return f"{sign}0.{'0' * -point}{text}"

    mantissa = text[0] if len(text) == 1 else f"{text[0]}.{text[1:]}"
    return f"{sign}{mantissa}e{point - 1:+d}"


def _fixed(value: float, places: int) -> str:
    """Exactly places fractional digits, ties rounded away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return format(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP), "f")


def _strip_zeros(text: str) -> str:
    if "." not in text or "e" in text:
        return text
    return text.rstrip("0").rstrip(".")


def sanitize_output(value: object) -> str:
    """
    Remove characters that could break out of a text node or attribute.

    Angle brackets, quotes, ampersands and control characters other than
    tab, newline and carriage return are dropped. Scientific notation
    (``e``, ``+``, ``-``) passes through untouched.

    Example:
        >>> sanitize_output('<b>"1e+10"</b>')
        'b1e+10/b'
    """
    return _UNSAFE_CHARS.sub("", str(value))
