"""Arithmetic behind the operator and unary keys, with typed failures."""

import math
from collections.abc import Callable

from pocketcalc.exceptions import (
    DivisionByZeroError,
    InvalidInputError,
    InvalidResultError,
    OverflowError,
)
from pocketcalc.validators import validate_operand


def check_result(result: float, operation: str, *operands: float) -> float:
    """
    Reject non-finite arithmetic results.

    Raises:
        InvalidResultError: If result is NaN
        OverflowError: If result is infinite
    """
    if math.isnan(result):
        raise InvalidResultError(operation, *operands)
    if math.isinf(result):
        raise OverflowError(operation, *operands)
    return result


def add(a: float, b: float) -> float:
    """
    Add two numbers.

    Properties:
        - Commutative: add(a, b) == add(b, a)
        - Identity: add(a, 0) == a

    Raises:
        InvalidInputError: If either operand is NaN
        OverflowError: If the sum is infinite
    """
    validate_operand(a)
    validate_operand(b)
    return check_result(a + b, "addition", a, b)


def subtract(a: float, b: float) -> float:
    """
    Subtract b from a.

    Properties:
        - Identity: subtract(a, 0) == a
        - Self-inverse: subtract(a, a) == 0

    Raises:
        InvalidInputError: If either operand is NaN
        OverflowError: If the difference is infinite
    """
    validate_operand(a)
    validate_operand(b)
    return check_result(a - b, "subtraction", a, b)


def multiply(a: float, b: float) -> float:
    """
    Multiply two numbers.

    Properties:
        - Commutative: multiply(a, b) == multiply(b, a)
        - Zero: multiply(a, 0) == 0

    Raises:
        InvalidInputError: If either operand is NaN
        OverflowError: If the product is infinite
    """
    validate_operand(a)
    validate_operand(b)
    return check_result(a * b, "multiplication", a, b)


def divide(a: float, b: float) -> float:
    """
    Divide a by b.

    Raises:
        InvalidInputError: If either operand is NaN
        DivisionByZeroError: If b is zero
        OverflowError: If the quotient is infinite
    """
    validate_operand(a)
    validate_operand(b)

    if b == 0:
        raise DivisionByZeroError(a)

    return check_result(a / b, "division", a, b)


def percentage(x: float) -> float:
    """Convert x to a fraction of one hundred."""
    validate_operand(x)
    return check_result(x / 100, "percentage", x)


def square_root(x: float) -> float:
    """
    Square root of x.

    Raises:
        InvalidInputError: If x is negative
    """
    validate_operand(x)

    if x < 0:
        raise InvalidInputError(x, "Square root of a negative number")

    return check_result(math.sqrt(x), "square root", x)


def square(x: float) -> float:
    validate_operand(x)
    return check_result(x * x, "square", x)


def cube(x: float) -> float:
    validate_operand(x)
    return check_result(x * x * x, "cube", x)


def reciprocal(x: float) -> float:
    """
    One divided by x.

    Raises:
        DivisionByZeroError: If x is zero
    """
    validate_operand(x)

    if x == 0:
        raise DivisionByZeroError(1.0)

    return check_result(1 / x, "reciprocal", x)


BINARY_OPERATIONS: dict[str, Callable[[float, float], float]] = {
    "+": add,
    "−": subtract,
    "×": multiply,
    "÷": divide,
}
