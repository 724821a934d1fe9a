# dao_governor/runtime/clock.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock in whole seconds."""

    def now(self) -> int:
        return int(time.time())


@dataclass
class ManualClock:
    """
    Deterministic clock for tests and simulations.

    The governor only ever reads it; callers move time forward explicitly.
    """

    current: int = 0

    def now(self) -> int:
        return int(self.current)

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self.current += int(seconds)
        return self.current

    def set(self, ts: int) -> None:
        if ts < self.current:
            raise ValueError("clock cannot move backwards")
        self.current = int(ts)
