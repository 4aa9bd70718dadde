"""Unit tests for keyboard key mapping."""

import pytest

from pocketcalc import Action, key_to_token


class TestPlainKeys:
    @pytest.mark.parametrize("key", list("0123456789"))
    def test_digits(self, key):
        assert key_to_token(key) == ("digit", key)

    @pytest.mark.parametrize(
        ("key", "symbol"), [("+", "+"), ("-", "−"), ("*", "×"), ("/", "÷")]
    )
    def test_operators(self, key, symbol):
        assert key_to_token(key) == ("operator", symbol)

    @pytest.mark.parametrize(
        ("key", "action"),
        [
            ("=", Action.EQUALS),
            ("Enter", Action.EQUALS),
            (".", Action.DECIMAL),
            ("Escape", Action.CLEAR),
            ("Backspace", Action.BACKSPACE),
            ("Delete", Action.CLEAR_ENTRY),
            ("%", Action.PERCENTAGE),
            ("r", Action.SQUARE_ROOT),
            ("R", Action.SQUARE_ROOT),
            ("s", Action.SQUARE),
            ("x", Action.CUBE),
            ("c", Action.CLEAR),
            ("C", Action.CLEAR),
            ("i", Action.RECIPROCAL),
        ],
    )
    def test_actions(self, key, action):
        assert key_to_token(key) == ("action", action)

    def test_m_recalls_memory(self):
        assert key_to_token("m") == ("action", Action.MEMORY_RECALL)

    def test_shift_m_stores_memory(self):
        assert key_to_token("m", shift=True) == ("action", Action.MEMORY_STORE)
        assert key_to_token("M") == ("action", Action.MEMORY_STORE)

    def test_shift_x_is_unbound(self):
        assert key_to_token("X", shift=True) is None

    @pytest.mark.parametrize("key", ["a", "Tab", "F5", "", "ee"])
    def test_unbound_keys(self, key):
        assert key_to_token(key) is None


class TestModifiedKeys:
    @pytest.mark.parametrize(
        ("key", "action"),
        [
            ("m", Action.MEMORY_STORE),
            ("=", Action.MEMORY_ADD),
            ("NumpadAdd", Action.MEMORY_ADD),
            ("-", Action.MEMORY_SUBTRACT),
            ("0", Action.MEMORY_CLEAR),
        ],
    )
    def test_memory_shortcuts(self, key, action):
        assert key_to_token(key, ctrl=True) == ("action", action)
        assert key_to_token(key, meta=True) == ("action", action)

    def test_ctrl_c_is_left_alone(self):
        assert key_to_token("c", ctrl=True) is None

    def test_ctrl_r_is_left_alone(self):
        assert key_to_token("r", ctrl=True) is None
