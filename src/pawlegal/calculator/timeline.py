"""Chronological timeline of procedural milestones."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from pawlegal.calculator.models import Milestone, TimelineEvent
from pawlegal.core.dates import days_between


class TimelineBuilder:
    """Sorts milestones and flags them relative to an evaluation date.

    Nothing is cached: every call recomputes past/urgent flags against the
    ``now`` it is given.
    """

    def __init__(self, urgent_days: int = 7) -> None:
        self._urgent_days = urgent_days

    @property
    def urgent_days(self) -> int:
        return self._urgent_days

    def build(self, now: date, events: Iterable[Milestone]) -> list[TimelineEvent]:
        # sorted() is stable, so same-day milestones keep insertion order
        ordered = sorted(events, key=lambda event: event.date)
        timeline: list[TimelineEvent] = []
        for event in ordered:
            is_past = event.date < now
            is_urgent = (
                event.is_deadline
                and not is_past
                and days_between(now, event.date) <= self._urgent_days
            )
            timeline.append(
                TimelineEvent(
                    label=event.label,
                    date=event.date,
                    is_deadline=event.is_deadline,
                    is_urgent=is_urgent,
                    is_past=is_past,
                )
            )
        return timeline
