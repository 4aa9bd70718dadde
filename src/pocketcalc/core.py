"""Calculator engine: the token-driven state machine behind the keypad."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from pocketcalc import operations
from pocketcalc.exceptions import CalculatorError, ErrorKind, InputTooLongError
from pocketcalc.formatting import format_result
from pocketcalc.validators import (
    is_digit,
    is_operator,
    is_within_length_budget,
    length_budget,
    parse_number,
    validate_history_limit,
    validate_operand,
    validate_precision,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Seconds an error message stays on the display before the engine clears it
ERROR_CLEAR_DELAY = 2.0

DEFAULT_PRECISION = 12
DEFAULT_HISTORY_LIMIT = 50


class Action(Enum):
    """Every non-digit, non-operator key the engine understands."""

    CLEAR = "clear"
    CLEAR_ENTRY = "clear-entry"
    BACKSPACE = "backspace"
    DECIMAL = "decimal"
    EQUALS = "equals"
    PERCENTAGE = "percentage"
    SQUARE_ROOT = "square-root"
    SQUARE = "square"
    CUBE = "cube"
    RECIPROCAL = "reciprocal"
    MEMORY_STORE = "memory-store"
    MEMORY_RECALL = "memory-recall"
    MEMORY_ADD = "memory-add"
    MEMORY_SUBTRACT = "memory-subtract"
    MEMORY_CLEAR = "memory-clear"


class TimerHandle(Protocol):
    """A pending callback returned by :meth:`Scheduler.call_later`."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback later; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle: ...


@dataclass(frozen=True)
class HistoryEntry:
    """One completed binary calculation."""

    expression: str
    result: float
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.expression} = {self.result}"


@dataclass(frozen=True)
class Display:
    """What the UI adapter renders after each token."""

    display: str
    operation_line: str
    errored: bool
    result: float | None = None
    error_kind: ErrorKind | None = None


@dataclass
class CalculatorState:
    """Mutable state owned by a single Calculator."""

    current_input: str = "0"
    previous_operand: float | None = None
    operator: str | None = None
    waiting_for_operand: bool = False
    has_new_operand: bool = False
    has_decimal: bool = False
    max_digits: int = DEFAULT_PRECISION
    is_error: bool = False
    memory_value: float = 0.0
    memory_active: bool = False
    history: list[HistoryEntry] = field(default_factory=list)
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def digit_count(self) -> int:
        """Length of the current input, not counting the decimal point."""
        return len(self.current_input.replace(".", ""))


class Calculator:
    """
    Keypad calculator engine.

    Tokens arrive one at a time through :meth:`submit_digit`,
    :meth:`submit_operator` and :meth:`submit_action`; each returns a
    :class:`Display` snapshot. The lower-level input methods return the
    engine itself so sequences can be chained.

    Errors never escape: division by zero, overflow and the like put the
    engine into an error state that shows a message until it is cleared,
    either by the user or by a timer armed on the optional scheduler.

    Example:
        >>> calc = Calculator()
        >>> calc.input_digit("5").input_operator("+").input_digit("9").square_root()
        Calculator(display='3', pending='5 +')
        >>> calc.calculate()
        8.0
    """

    def __init__(
        self,
        precision: int = DEFAULT_PRECISION,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        scheduler: Scheduler | None = None,
        listener: Callable[[Display], object] | None = None,
    ) -> None:
        """
        Initialize a calculator.

        Args:
            precision: Digit budget for input and results (8, 10, 12 or 15)
            history_limit: Maximum history entries kept (25, 50 or 100)
            scheduler: Runs the error auto-clear timer; without one errors
                stay until cleared
            listener: Called with a fresh snapshot when the timer changes state

        Raises:
            OutOfRangeError: If precision or history_limit is not a preset
        """
        self._state = CalculatorState(
            max_digits=validate_precision(precision),
            history_limit=validate_history_limit(history_limit),
        )
        self._scheduler = scheduler
        self._listener = listener
        self._error_timer: TimerHandle | None = None
        self._error_generation = 0
        self._error_kind: ErrorKind | None = None
        self._handlers: dict[Action, Callable[[], object]] = {
            Action.CLEAR: self.clear,
            Action.CLEAR_ENTRY: self.clear_entry,
            Action.BACKSPACE: self.backspace,
            Action.DECIMAL: self.input_decimal,
            Action.EQUALS: self.calculate,
            Action.PERCENTAGE: self.percentage,
            Action.SQUARE_ROOT: self.square_root,
            Action.SQUARE: self.square,
            Action.CUBE: self.cube,
            Action.RECIPROCAL: self.reciprocal,
            Action.MEMORY_STORE: self.memory_store,
            Action.MEMORY_RECALL: self.memory_recall,
            Action.MEMORY_ADD: self.memory_add,
            Action.MEMORY_SUBTRACT: self.memory_subtract,
            Action.MEMORY_CLEAR: self.memory_clear,
        }

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def history(self) -> list[HistoryEntry]:
        """Completed calculations, most recent first."""
        return self._state.history.copy()

    @property
    def operation_line(self) -> str:
        state = self._state
        if state.previous_operand is None or state.operator is None:
            return ""
        return f"{self._format(state.previous_operand)} {state.operator}"

    # -- adapter interface --------------------------------------------------

    def submit_digit(self, digit: str) -> Display:
        self.input_digit(digit)
        return self.snapshot()

    def submit_operator(self, operator: str) -> Display:
        self.input_operator(operator)
        return self.snapshot()

    def submit_action(self, action: Action | str) -> Display:
        """
        Apply one action key.

        Args:
            action: An :class:`Action` or its string value, e.g. ``"square-root"``

        Returns:
            The display snapshot; ``result`` is set when equals completed
        """
        try:
            action = Action(action)
        except ValueError:
            logger.warning("Rejected unknown action %r", action)
            return self.snapshot()

        outcome = self._handlers[action]()
        if action is Action.EQUALS:
            return self.snapshot(result=outcome)
        return self.snapshot()

    def snapshot(self, result: float | None = None) -> Display:
        state = self._state
        return Display(
            display=state.current_input,
            operation_line=self.operation_line,
            errored=state.is_error,
            result=result,
            error_kind=self._error_kind if state.is_error else None,
        )

    def configure(self, precision: int | None = None, history_limit: int | None = None) -> Calculator:
        """
        Apply new settings.

        A new precision takes effect on the next entry or calculation;
        a smaller history limit drops the oldest entries immediately.

        Raises:
            OutOfRangeError: If a value is not one of the presets
        """
        state = self._state
        if precision is not None:
            state.max_digits = validate_precision(precision)
        if history_limit is not None:
            state.history_limit = validate_history_limit(history_limit)
            del state.history[state.history_limit :]
        return self

    # -- entry ----------------------------------------------------------------

    def input_digit(self, digit: str) -> Calculator:
        """Type one digit; ignored once the display holds max_digits digits."""
        if not is_digit(digit):
            logger.warning("Rejected invalid digit token %r", digit)
            return self

        if self._state.is_error:
            self.clear()

        state = self._state
        candidate = digit if state.waiting_for_operand else state.current_input + digit
        if not self._check_length(candidate):
            return self

        if state.waiting_for_operand:
            self._set_input(digit)
            state.waiting_for_operand = False
        elif state.current_input == "0":
            self._set_input(digit)
        elif state.digit_count < state.max_digits:
            self._set_input(state.current_input + digit)
        else:
            return self

        state.has_new_operand = True
        return self

    def input_decimal(self) -> Calculator:
        """Type a decimal point; at most one per number."""
        if self._state.is_error:
            self.clear()

        state = self._state
        candidate = "0." if state.waiting_for_operand else state.current_input + "."
        if not self._check_length(candidate):
            return self

        if state.waiting_for_operand:
            self._set_input("0.")
            state.waiting_for_operand = False
        elif not state.has_decimal and state.digit_count < state.max_digits:
            self._set_input(state.current_input + ".")
        else:
            return self

        state.has_new_operand = True
        return self

    def input_operator(self, operator: str) -> Calculator:
        """
        Select a binary operator.

        The pending operation is committed only when a new operand was
        entered after it was selected. Pressing a different operator
        straight after another one just replaces it.
        """
        if not is_operator(operator):
            logger.warning("Rejected invalid operator token %r", operator)
            return self

        state = self._state
        if state.is_error:
            return self

        if state.previous_operand is None:
            try:
                state.previous_operand = validate_operand(parse_number(state.current_input))
            except CalculatorError as e:
                self._show_error(e)
                return self
        elif state.operator is not None and state.has_new_operand:
            result = self.calculate()
            if result is None:
                return self
            state.previous_operand = result

        state.operator = operator
        state.waiting_for_operand = True
        state.has_new_operand = False
        return self

    def calculate(self) -> float | None:
        """
        Commit the pending binary operation.

        Returns:
            The raw result, or None if nothing was pending or it failed
        """
        state = self._state
        if state.is_error or state.operator is None or state.previous_operand is None:
            return None

        previous = state.previous_operand
        operator = state.operator
        current = parse_number(state.current_input)

        try:
            result = operations.BINARY_OPERATIONS[operator](previous, current)
        except CalculatorError as e:
            self._show_error(e)
            return None

        expression = f"{self._format(previous)} {operator} {self._format(current)}"
        self._set_input(self._format(result))
        state.previous_operand = None
        state.operator = None
        state.waiting_for_operand = True
        state.has_new_operand = False
        self._add_to_history(expression, result)
        logger.debug("Calculated %s = %s", expression, result)
        return result

    # -- clearing -------------------------------------------------------------

    def clear(self) -> Calculator:
        """Reset display and pending operation; memory and history survive."""
        self._cancel_error_timer()
        state = self._state
        state.current_input = "0"
        state.previous_operand = None
        state.operator = None
        state.waiting_for_operand = False
        state.has_new_operand = False
        state.has_decimal = False
        state.is_error = False
        self._error_kind = None
        return self

    def clear_entry(self) -> Calculator:
        """Reset only the current entry, keeping any pending operation."""
        if self._state.is_error:
            return self.clear()

        self._set_input("0")
        self._state.has_new_operand = True
        return self

    def backspace(self) -> Calculator:
        state = self._state
        if state.is_error:
            return self.clear()

        remaining = state.current_input[:-1]
        if remaining in ("", "-"):
            remaining = "0"
        self._set_input(remaining)
        if not state.waiting_for_operand:
            state.has_new_operand = True
        return self

    # -- unary operations -----------------------------------------------------

    def percentage(self) -> Calculator:
        return self._apply_unary(operations.percentage)

    def square_root(self) -> Calculator:
        return self._apply_unary(operations.square_root)

    def square(self) -> Calculator:
        return self._apply_unary(operations.square)

    def cube(self) -> Calculator:
        return self._apply_unary(operations.cube)

    def reciprocal(self) -> Calculator:
        return self._apply_unary(operations.reciprocal)

    def _apply_unary(self, operation: Callable[[float], float]) -> Calculator:
        """Replace the displayed value in place; a pending operation is untouched."""
        state = self._state
        if state.is_error:
            return self

        try:
            result = operation(parse_number(state.current_input))
        except CalculatorError as e:
            self._show_error(e)
            return self

        self._set_input(self._format(result))
        state.waiting_for_operand = True
        state.has_new_operand = True
        return self

    # -- memory -----------------------------------------------------------------

    def _display_value(self) -> float | None:
        if self._state.is_error:
            return None
        try:
            return validate_operand(parse_number(self._state.current_input))
        except CalculatorError:
            return None

    def memory_store(self) -> Calculator:
        value = self._display_value()
        if value is not None:
            self._state.memory_value = value
            self._state.memory_active = True
        return self

    def memory_recall(self) -> Calculator:
        state = self._state
        if state.is_error or not state.memory_active:
            return self

        self._set_input(self._format(state.memory_value))
        state.waiting_for_operand = True
        state.has_new_operand = True
        return self

    def memory_add(self) -> Calculator:
        return self._adjust_memory(operations.add)

    def memory_subtract(self) -> Calculator:
        return self._adjust_memory(operations.subtract)

    def _adjust_memory(self, operation: Callable[[float, float], float]) -> Calculator:
        """Fold the display into memory; an overflowing total leaves memory unchanged."""
        value = self._display_value()
        if value is None:
            return self

        try:
            self._state.memory_value = operation(self._state.memory_value, value)
        except CalculatorError as e:
            logger.warning("Memory not updated: %s", e)
            return self
        self._state.memory_active = True
        return self

    def memory_clear(self) -> Calculator:
        self._state.memory_value = 0.0
        self._state.memory_active = False
        return self

    # -- history ----------------------------------------------------------------

    def _add_to_history(self, expression: str, result: float) -> None:
        state = self._state
        state.history.insert(0, HistoryEntry(expression=expression, result=result))
        del state.history[state.history_limit :]

    def clear_history(self) -> Calculator:
        self._state.history.clear()
        return self

    def use_history_item(self, index: int) -> Calculator:
        """
        Load the result of a history entry into the display.

        Raises:
            IndexError: If there is no entry at index
        """
        entry = self._state.history[index]
        if self._state.is_error:
            self.clear()

        self._set_input(self._format(entry.result))
        self._state.waiting_for_operand = True
        self._state.has_new_operand = True
        return self

    # -- errors -----------------------------------------------------------------

    def _check_length(self, candidate: str) -> bool:
        max_digits = self._state.max_digits
        if is_within_length_budget(candidate, max_digits):
            return True
        self._show_error(InputTooLongError(candidate, length_budget(max_digits)))
        return False

    def _show_error(self, error: CalculatorError) -> None:
        logger.info("Calculator error: %s", error)
        state = self._state
        state.is_error = True
        state.current_input = error.display_message
        state.has_decimal = False
        state.waiting_for_operand = False
        self._error_kind = error.kind
        self._arm_error_timer()

    def _arm_error_timer(self) -> None:
        self._cancel_error_timer()
        self._error_generation += 1
        if self._scheduler is None:
            return

        generation = self._error_generation
        self._error_timer = self._scheduler.call_later(
            ERROR_CLEAR_DELAY, lambda: self._expire_error(generation)
        )

    def _cancel_error_timer(self) -> None:
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None

    def _expire_error(self, generation: int) -> None:
        if generation != self._error_generation or not self._state.is_error:
            return

        self._error_timer = None
        self.clear()
        if self._listener is not None:
            self._listener(self.snapshot())

    # -- helpers ----------------------------------------------------------------

    def _format(self, value: float) -> str:
        return format_result(value, self._state.max_digits)

    def _set_input(self, text: str) -> None:
        self._state.current_input = text
        self._state.has_decimal = "." in text

    def __repr__(self) -> str:
        return f"Calculator(display={self._state.current_input!r}, pending={self.operation_line!r})"
