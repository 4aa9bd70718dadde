"""
Property-based tests for arithmetic and formatting using Hypothesis.

These tests verify properties that should hold for all inputs,
not just specific examples.
"""

import contextlib
import math

import pytest
from hypothesis import assume, example, given
from hypothesis import strategies as st

from pocketcalc import (
    DivisionByZeroError,
    InvalidInputError,
    OverflowError,
    add,
    divide,
    format_result,
    multiply,
    parse_number,
    reciprocal,
    sanitize_output,
    square,
    square_root,
)

precisions = st.sampled_from([8, 10, 12, 15])

safe_floats = st.floats(
    min_value=-1e100,
    max_value=1e100,
    allow_nan=False,
    allow_infinity=False,
)

any_floats = st.floats(allow_nan=True, allow_infinity=True)


@st.composite
def displayable(draw):
    """A precision and a value comfortably inside its fixed-notation range."""
    max_digits = draw(precisions)
    bound = 10.0 ** (max_digits - 1)
    value = draw(st.floats(min_value=-bound, max_value=bound, allow_nan=False))
    return value, max_digits


@pytest.mark.property
class TestFormatProperties:
    """Property-based tests for format_result."""

    @given(case=displayable())
    @example(case=(0.1 + 0.2, 12))
    @example(case=(2 / 3, 8))
    @example(case=(-1e-8, 10))
    @example(case=(9999999.99, 8))
    @example(case=(1 / 30000000, 8))
    def test_idempotent(self, case):
        """Formatting a formatted-and-reparsed value is stable."""
        value, max_digits = case
        # A 9-character negative like -1.234e-7 is cut back to -0.0000001
        assume(not (max_digits == 8 and -1e-6 < value < 0))
        once = format_result(value, max_digits)
        assert format_result(parse_number(once), max_digits) == once

    @given(value=safe_floats, max_digits=precisions)
    def test_exponential_fallback(self, value, max_digits):
        """Magnitudes at or above the budget are rendered with six fractional digits."""
        formatted = format_result(value, max_digits)
        if abs(value) >= 10**max_digits:
            mantissa, _, exponent = formatted.partition("e")
            assert len(mantissa.lstrip("-").split(".")[1]) == 6
            assert exponent[0] in "+-"
        elif abs(value) >= 1e-6:
            assert "e" not in formatted

    @given(value=st.floats(min_value=1e-10, max_value=9.99e-7), max_digits=precisions)
    def test_tiny_values_never_collapse_to_zero(self, value, max_digits):
        """Anything the ten-place rounding keeps shows up in exponent form."""
        formatted = format_result(value, max_digits)
        assert formatted != "0"
        assert "e-" in formatted

    @given(value=safe_floats, max_digits=precisions)
    def test_close_to_input(self, value, max_digits):
        """Fixed output never drifts from the value by more than its last digit."""
        formatted = format_result(value, max_digits)
        if abs(value) < 10**max_digits:
            assert abs(parse_number(formatted) - value) <= 0.5 + 1e-9 * abs(value)

    @given(value=any_floats, max_digits=precisions)
    def test_never_raises(self, value, max_digits):
        formatted = format_result(value, max_digits)
        assert formatted == "Error" or not math.isnan(parse_number(formatted))

    @given(value=safe_floats, max_digits=precisions)
    def test_no_negative_zero(self, value, max_digits):
        assert format_result(value, max_digits) != "-0"


@pytest.mark.property
class TestArithmeticProperties:
    """Property-based tests for the operator arithmetic."""

    @given(a=safe_floats, b=safe_floats)
    def test_add_commutativity(self, a, b):
        with contextlib.suppress(OverflowError):
            assert add(a, b) == add(b, a)

    @given(a=safe_floats, b=safe_floats)
    def test_multiply_commutativity(self, a, b):
        with contextlib.suppress(OverflowError):
            assert multiply(a, b) == multiply(b, a)

    @given(a=safe_floats)
    def test_divide_by_zero_always_raises(self, a):
        with pytest.raises(DivisionByZeroError):
            divide(a, 0)

    @given(a=st.floats(min_value=0, max_value=1e100))
    def test_square_root_inverts_square(self, a):
        root = square_root(a)
        assert math.isclose(square(root), a, rel_tol=1e-9, abs_tol=1e-300)

    @given(a=st.floats(max_value=-1e-300, allow_nan=False, allow_infinity=False))
    def test_square_root_rejects_negative(self, a):
        with pytest.raises(InvalidInputError):
            square_root(a)

    @given(a=st.floats(min_value=1e-100, max_value=1e100))
    def test_reciprocal_involution(self, a):
        assert math.isclose(reciprocal(reciprocal(a)), a, rel_tol=1e-12)


@pytest.mark.property
class TestSanitizeProperties:
    @given(text=st.text())
    def test_output_is_safe(self, text):
        cleaned = sanitize_output(text)
        assert not set(cleaned) & set("<>\"'&")
        assert all(ch in "\t\n\r" or ord(ch) >= 0x20 for ch in cleaned)

    @given(text=st.text())
    def test_idempotent(self, text):
        assert sanitize_output(sanitize_output(text)) == sanitize_output(text)
