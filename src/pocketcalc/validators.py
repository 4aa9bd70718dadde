"""Input validation predicates and settings checks."""

import math
import re

from pocketcalc.exceptions import InvalidInputError, OutOfRangeError

DIGITS = frozenset("0123456789")

# Display symbols of the four binary operators
OPERATORS = ("+", "−", "×", "÷")

PRECISION_CHOICES = (8, 10, 12, 15)
HISTORY_LIMIT_CHOICES = (25, 50, 100)

_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def is_digit(token: object) -> bool:
    """Return True if token is exactly one character in '0'..'9'."""
    return isinstance(token, str) and len(token) == 1 and token in DIGITS


def is_operator(token: object) -> bool:
    """
    Return True if token is one of the whitelisted operator symbols.

    Operator tokens only ever select a branch in the engine, so anything
    outside the whitelist (including ``"eval"`` or markup) is rejected here.
    """
    return isinstance(token, str) and token in OPERATORS


def length_budget(max_digits: int) -> int:
    """Maximum number of characters any candidate input may have."""
    return max_digits * 2 + 10


def is_within_length_budget(candidate: str, max_digits: int) -> bool:
    """
    Check a candidate input against the defense-in-depth length ceiling.

    The ceiling is deliberately looser than the digit budget so it leaves
    room for a sign, a decimal point and an exponent.

    Args:
        candidate: The input string the token would produce
        max_digits: The configured precision budget

    Returns:
        True if ``len(candidate) <= max_digits * 2 + 10``
    """
    return len(str(candidate)) <= length_budget(max_digits)


def parse_number(text: str) -> float:
    """
    Parse the longest numeric prefix of text.

    Partial literals such as ``"5."`` parse as 5.0; text with no numeric
    prefix (an error message, for instance) parses as NaN.
    """
    match = _NUMBER_PREFIX.match(text)
    if match is None:
        return math.nan
    return float(match.group(1))


def validate_operand(value: float) -> float:
    """
    Validate that a parsed operand is a number.

    Raises:
        InvalidInputError: If value is NaN
    """
    if math.isnan(value):
        raise InvalidInputError(value, "NaN is not allowed")
    return value


def validate_precision(value: int) -> int:
    """
    Validate a precision preset.

    Raises:
        OutOfRangeError: If value is not one of 8, 10, 12 or 15
    """
    if isinstance(value, bool) or value not in PRECISION_CHOICES:
        raise OutOfRangeError("precision", value, PRECISION_CHOICES)
    return value


def validate_history_limit(value: int) -> int:
    """
    Validate a history limit preset.

    Raises:
        OutOfRangeError: If value is not one of 25, 50 or 100
    """
    if isinstance(value, bool) or value not in HISTORY_LIMIT_CHOICES:
        raise OutOfRangeError("history_limit", value, HISTORY_LIMIT_CHOICES)
    return value
