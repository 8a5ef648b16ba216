"""Injectable source of the current calendar date."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report today's date."""

    def today(self) -> date: ...


class SystemClock:
    """Reads the local calendar date. Only the HTTP boundary and CLI use it."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Always reports the same date. Used in tests and for replaying a case."""

    def __init__(self, current: date) -> None:
        self._current = current

    def today(self) -> date:
        return self._current
