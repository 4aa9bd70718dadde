"""Pytest configuration and shared fixtures."""

import os

import pytest
from hypothesis import Verbosity, settings

# Configure Hypothesis profiles
settings.register_profile("ci", max_examples=200, deadline=None)
settings.register_profile("dev", max_examples=50, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)

profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(profile)


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects timers instead of running them; tests fire them explicitly."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def fire_all(self):
        """Run every timer, cancelled ones included, like a late callback would."""
        for timer in list(self.timers):
            timer.callback()


def _press(calc, keys):
    """Feed a compact key string such as ``"12+3="`` to the engine."""
    from pocketcalc.keyboard import key_to_token

    snapshot = calc.snapshot()
    for key in keys:
        kind, value = key_to_token(key)
        if kind == "digit":
            snapshot = calc.submit_digit(value)
        elif kind == "operator":
            snapshot = calc.submit_operator(value)
        else:
            snapshot = calc.submit_action(value)
    return snapshot


@pytest.fixture
def press():
    """Provide a helper that feeds a key string to a calculator."""
    return _press


@pytest.fixture
def calculator():
    """Provide a fresh Calculator instance."""
    from pocketcalc import Calculator

    return Calculator()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def timed_calculator(scheduler):
    """Provide a Calculator whose error timer runs on a FakeScheduler."""
    from pocketcalc import Calculator

    return Calculator(scheduler=scheduler)


@pytest.fixture
def sample_numbers():
    """Provide results whose display text must survive being typed back in."""
    return [
        0,
        -1,
        0.5,
        1e10,
        -1e10,
        1e-10,
        -1e-8,
        1 / 3,
        24539.0625,
        0.1 + 0.2,  # Floating point edge case
        1 / 30000000,  # Exponent form
    ]
