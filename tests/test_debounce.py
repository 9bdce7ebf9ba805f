"""
Unit tests for pondcalc.debounce using a hand-driven clock.
"""
import pytest

from pondcalc.debounce import Debouncer


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def debouncer(clock):
    return Debouncer(0.3, clock=clock)


def test_nothing_pending_initially(debouncer):
    assert not debouncer.pending
    assert debouncer.remaining() == 0.0
    assert debouncer.fire_if_due() == (False, None)


def test_fires_only_after_window(debouncer, clock):
    calls = []
    debouncer.schedule(calls.append, "a")

    clock.advance(0.29)
    assert debouncer.fire_if_due() == (False, None)
    assert calls == []

    clock.advance(0.02)
    assert debouncer.fire_if_due() == (True, None)
    assert calls == ["a"]
    assert not debouncer.pending


def test_only_last_call_in_window_runs(debouncer, clock):
    calls = []
    for ch in "abcd":
        debouncer.schedule(calls.append, ch)
        clock.advance(0.2)  # each keystroke lands inside the previous window

    assert not debouncer.is_due()
    clock.advance(0.15)
    debouncer.fire_if_due()
    debouncer.fire_if_due()
    assert calls == ["d"]


def test_reschedule_restarts_window(debouncer, clock):
    debouncer.schedule(lambda: None)
    clock.advance(0.2)
    debouncer.schedule(lambda: None)
    assert debouncer.remaining() == pytest.approx(0.3)


def test_cancel_drops_pending_call(debouncer, clock):
    calls = []
    debouncer.schedule(calls.append, 1)
    debouncer.cancel()
    clock.advance(1.0)
    assert debouncer.fire_if_due() == (False, None)
    assert calls == []


def test_returns_callback_result(debouncer, clock):
    debouncer.schedule(lambda x, y=0: x + y, 2, y=3)
    clock.advance(0.3)
    assert debouncer.fire_if_due() == (True, 5)


def test_flush_runs_immediately(debouncer):
    debouncer.schedule(lambda: "done")
    assert debouncer.flush() == (True, "done")
    assert debouncer.flush() == (False, None)


def test_callback_may_reschedule(debouncer, clock):
    def again():
        debouncer.schedule(lambda: None)

    debouncer.schedule(again)
    clock.advance(0.3)
    debouncer.fire_if_due()
    assert debouncer.pending


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        Debouncer(-1)
