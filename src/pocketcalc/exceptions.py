"""Custom exceptions for the pocketcalc engine."""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Machine-readable code for an error shown on the display."""

    DIVIDE_BY_ZERO = "divide-by-zero"
    INVALID_INPUT = "invalid-input"
    OVERFLOW = "overflow"
    INVALID_RESULT = "invalid-result"
    INPUT_TOO_LONG = "input-too-long"


class CalculatorError(Exception):
    """
    Base exception for all calculator errors.

    Attributes:
        kind: Code the engine reports alongside the error display
        display_message: Text shown in place of the number while the
            error is active; ``str()`` of the exception is for logs
    """

    kind: ErrorKind | None = None
    display_message = "Error"

    def __init__(self, message: str, value: Any = None) -> None:
        self.message = message
        self.value = value
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.message}: {self.value}"
        return self.message


class DivisionByZeroError(CalculatorError):
    """Raised when dividing by zero or taking the reciprocal of zero."""

    kind = ErrorKind.DIVIDE_BY_ZERO
    display_message = "Cannot divide by zero"

    def __init__(self, numerator: float) -> None:
        super().__init__("Division by zero", numerator)
        self.numerator = numerator


class OverflowError(CalculatorError):
    """Raised when a calculation results in an infinite value."""

    kind = ErrorKind.OVERFLOW
    display_message = "Overflow"

    def __init__(self, operation: str, *operands: float) -> None:
        super().__init__(f"Overflow in {operation}", operands)
        self.operation = operation
        self.operands = operands


class InvalidInputError(CalculatorError):
    """Raised when an operand is not a number or outside an operation's domain."""

    kind = ErrorKind.INVALID_INPUT
    display_message = "Invalid input"

    def __init__(self, value: Any, reason: str = "invalid input") -> None:
        super().__init__(reason, value)
        self.reason = reason


class InvalidResultError(CalculatorError):
    """Raised when an arithmetic result is NaN."""

    kind = ErrorKind.INVALID_RESULT
    display_message = "Invalid result"

    def __init__(self, operation: str, *operands: float) -> None:
        super().__init__(f"Invalid result in {operation}", operands)
        self.operation = operation
        self.operands = operands


class InputTooLongError(CalculatorError):
    """Raised when a candidate input exceeds the length budget."""

    kind = ErrorKind.INPUT_TOO_LONG
    display_message = "Input too long. Maximum length exceeded."

    def __init__(self, candidate: str, limit: int) -> None:
        super().__init__(f"Input longer than {limit} characters", len(candidate))
        self.candidate = candidate
        self.limit = limit


class OutOfRangeError(CalculatorError):
    """Raised when a setting is outside its allowed values."""

    def __init__(self, name: str, value: Any, allowed: tuple[Any, ...]) -> None:
        choices = ", ".join(map(str, allowed))
        super().__init__(f"{name} must be one of [{choices}]", value)
        self.name = name
        self.allowed = allowed
