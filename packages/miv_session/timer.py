import math
import time
from enum import Enum
from typing import Optional


class Clock:
    """Wall clock in epoch milliseconds. Swapped for a fake in tests."""
    def now_ms(self) -> int:
        return int(time.time() * 1000)


class TimerEvent(str, Enum):
    TIME_EXPIRED = "TIME_EXPIRED"


def remaining_seconds(deadline_ms: int, now_ms: int) -> int:
    """Whole seconds until `deadline_ms`, rounded up and never negative."""
    return max(0, math.ceil((deadline_ms - now_ms) / 1000))


class CountdownTimer:
    """
    Countdown for the active question.

    Remaining time is always derived from an absolute deadline, so a reload
    (new engine, new process) cannot give the candidate extra time. The
    displayed value only ever goes down while running.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self.deadline_ms = 0
        self.time_left = 0
        self.running = False
        self._expired_raised = False

    def start(self, seconds: int) -> int:
        """Arm a fresh deadline `seconds` from now and return it."""
        self.deadline_ms = self.clock.now_ms() + seconds * 1000
        self.time_left = seconds
        self.running = True
        self._expired_raised = False
        return self.deadline_ms

    def restore(self, deadline_ms: int) -> Optional[TimerEvent]:
        """
        Re-arm from a persisted deadline.
        Raises TIME_EXPIRED right away if the deadline already passed.
        """
        self.deadline_ms = deadline_ms
        self.time_left = remaining_seconds(deadline_ms, self.clock.now_ms())
        self.running = True
        self._expired_raised = False
        if self.time_left == 0:
            return self._raise_expired()
        return None

    def hold(self, seconds: int) -> None:
        """Stop the clock showing `seconds` (paused, reviewing, not started)."""
        self.deadline_ms = 0
        self.time_left = max(0, seconds)
        self.running = False

    def remaining(self) -> int:
        if not self.running:
            return self.time_left
        return min(self.time_left, remaining_seconds(self.deadline_ms, self.clock.now_ms()))

    def tick(self) -> Optional[TimerEvent]:
        """Refresh the displayed time. Returns TIME_EXPIRED exactly once."""
        if not self.running:
            return None
        self.time_left = self.remaining()
        if self.time_left == 0:
            return self._raise_expired()
        return None

    @property
    def expired(self) -> bool:
        return self._expired_raised

    def _raise_expired(self) -> Optional[TimerEvent]:
        self.running = False
        if self._expired_raised:
            return None
        self._expired_raised = True
        return TimerEvent.TIME_EXPIRED
