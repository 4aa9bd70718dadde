"""
Keypad calculator engine.

The package turns key presses into display text:
- a token-driven state machine with memory and history
- bounded, precision-aware formatting of results
- whitelist validation of every digit and operator token
- recoverable, user-visible errors instead of exceptions
"""

from pocketcalc.core import (
    Action,
    Calculator,
    CalculatorState,
    Display,
    HistoryEntry,
    Scheduler,
)
from pocketcalc.exceptions import (
    CalculatorError,
    DivisionByZeroError,
    ErrorKind,
    InputTooLongError,
    InvalidInputError,
    InvalidResultError,
    OutOfRangeError,
    OverflowError,
)
from pocketcalc.formatting import format_result, sanitize_output
from pocketcalc.keyboard import key_to_token
from pocketcalc.operations import (
    add,
    cube,
    divide,
    multiply,
    percentage,
    reciprocal,
    square,
    square_root,
    subtract,
)
from pocketcalc.settings import Settings, SettingsStore, next_theme
from pocketcalc.validators import (
    is_digit,
    is_operator,
    is_within_length_budget,
    parse_number,
    validate_history_limit,
    validate_precision,
)

__all__ = [
    "Action",
    "Calculator",
    "CalculatorError",
    "CalculatorState",
    "Display",
    "DivisionByZeroError",
    "ErrorKind",
    "HistoryEntry",
    "InputTooLongError",
    "InvalidInputError",
    "InvalidResultError",
    "OutOfRangeError",
    "OverflowError",
    "Scheduler",
    "Settings",
    "SettingsStore",
    "add",
    "cube",
    "divide",
    "format_result",
    "is_digit",
    "is_operator",
    "is_within_length_budget",
    "key_to_token",
    "multiply",
    "next_theme",
    "parse_number",
    "percentage",
    "reciprocal",
    "sanitize_output",
    "square",
    "square_root",
    "subtract",
    "validate_history_limit",
    "validate_precision",
]

__version__ = "0.1.0"
