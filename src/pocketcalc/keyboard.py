"""Translation of keyboard keys into engine tokens."""

from __future__ import annotations

from pocketcalc.core import Action
from pocketcalc.validators import is_digit

Token = tuple[str, "str | Action"]

DIGIT = "digit"
OPERATOR = "operator"
ACTION = "action"

_OPERATOR_KEYS = {"+": "+", "-": "−", "*": "×", "/": "÷"}

_ACTION_KEYS = {
    "=": Action.EQUALS,
    "Enter": Action.EQUALS,
    ".": Action.DECIMAL,
    "Escape": Action.CLEAR,
    "Backspace": Action.BACKSPACE,
    "Delete": Action.CLEAR_ENTRY,
    "%": Action.PERCENTAGE,
    "r": Action.SQUARE_ROOT,
    "s": Action.SQUARE,
    "x": Action.CUBE,
    "c": Action.CLEAR,
    "i": Action.RECIPROCAL,
}

# Keys pressed together with Ctrl or Cmd
_MODIFIED_KEYS = {
    "m": Action.MEMORY_STORE,
    "=": Action.MEMORY_ADD,
    "numpadadd": Action.MEMORY_ADD,
    "-": Action.MEMORY_SUBTRACT,
    "numpadsubtract": Action.MEMORY_SUBTRACT,
    "0": Action.MEMORY_CLEAR,
    "numpad0": Action.MEMORY_CLEAR,
}


def key_to_token(
    key: str, ctrl: bool = False, meta: bool = False, shift: bool = False
) -> Token | None:
    """
    Map a key press to a ``(kind, value)`` token, or None for unbound keys.

    Ctrl/Cmd combinations drive the memory keys, so with either modifier
    held only those combinations are recognised; Ctrl+C stays a copy.

    Example:
        >>> key_to_token("7")
        ('digit', '7')
        >>> key_to_token("*")
        ('operator', '×')
        >>> key_to_token("m", shift=True)
        ('action', <Action.MEMORY_STORE: 'memory-store'>)
    """
    if ctrl or meta:
        action = _MODIFIED_KEYS.get(key.lower())
        return (ACTION, action) if action is not None else None

    if is_digit(key):
        return (DIGIT, key)
    if key in _OPERATOR_KEYS:
        return (OPERATOR, _OPERATOR_KEYS[key])
    if key.lower() == "m":
        return (ACTION, Action.MEMORY_STORE if shift or key == "M" else Action.MEMORY_RECALL)

    action = _ACTION_KEYS.get(key)
    if action is None and len(key) == 1:
        action = _ACTION_KEYS.get(key.lower())
    if action is Action.CUBE and shift:
        return None
    return (ACTION, action) if action is not None else None
