# pondcalc/debounce.py
"""Cancellable timer used to hold off recalculation while the user is typing.

Streamlit has no background timers we can rely on, so this is a polled
timer: ``schedule`` arms it, ``fire_if_due`` runs the pending call once the
window has passed. Scheduling again before then replaces the pending call
and restarts the window, so only the last input inside the window counts.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Optional, Tuple


class Debouncer:
    def __init__(self, delay_seconds: float = 0.3, clock: Callable[[], float] = time.monotonic):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay = float(delay_seconds)
        self._clock = clock
        self._deadline: Optional[float] = None
        self._call: Optional[Tuple[Callable[..., Any], tuple, dict]] = None

    @property
    def pending(self) -> bool:
        return self._call is not None

    def schedule(self, callback: Callable[..., Any], *args, **kwargs) -> None:
        self._call = (callback, args, kwargs)
        self._deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self._call = None
        self._deadline = None

    def remaining(self) -> float:
        """Seconds until the pending call is due; 0.0 when nothing is pending."""
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def is_due(self) -> bool:
        return self.pending and self._clock() >= self._deadline

    def fire_if_due(self) -> Tuple[bool, Any]:
        """Run the pending call if its window has passed.

        Returns (fired, callback result). The timer is disarmed before the
        callback runs, so a callback that reschedules is honoured.
        """
        if not self.is_due():
            return False, None
        callback, args, kwargs = self._call
        self.cancel()
        return True, callback(*args, **kwargs)

    def flush(self) -> Tuple[bool, Any]:
        """Run the pending call now, ignoring the window."""
        if not self.pending:
            return False, None
        callback, args, kwargs = self._call
        self.cancel()
        return True, callback(*args, **kwargs)
