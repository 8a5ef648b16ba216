"""Urgency classification of a signed day count."""

from __future__ import annotations

from pydantic import BaseModel

from pawlegal.calculator.models import Urgency


class UrgencyThresholds(BaseModel):
    """Bucket boundaries, in days remaining.

    ``overdue`` below ``overdue_below``; ``urgent`` up to ``urgent_max``
    (inclusive); ``warning`` up to ``warning_max`` when a warning tier exists;
    ``nominal`` otherwise.
    """

    name: str
    overdue_below: int = 0
    urgent_max: int
    warning_max: int | None = None


# Permit renewal: urgent strictly under 60 days, no warning tier.
RENEWAL_THRESHOLDS = UrgencyThresholds(name="permit_renewal", urgent_max=59)

# Appeal and tribunal windows.
DEADLINE_THRESHOLDS = UrgencyThresholds(name="deadline", urgent_max=7, warning_max=30)

# Short statutory windows (decision appeals, RAPO filing) carry no warning tier.
SHORT_DEADLINE_THRESHOLDS = UrgencyThresholds(name="short_deadline", urgent_max=7)


class UrgencyClassifier:
    """Maps days remaining to an urgency bucket under a given threshold set."""

    def classify(self, days_remaining: int, thresholds: UrgencyThresholds) -> Urgency:
        if days_remaining < thresholds.overdue_below:
            return Urgency.OVERDUE
        if days_remaining <= thresholds.urgent_max:
            return Urgency.URGENT
        if thresholds.warning_max is not None and days_remaining <= thresholds.warning_max:
            return Urgency.WARNING
        return Urgency.NOMINAL
