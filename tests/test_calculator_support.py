"""Tests for calendar helpers, clocks, timeline, urgency buckets and settings."""

from __future__ import annotations

from datetime import date

import pytest

from pawlegal.calculator.models import Milestone, Urgency
from pawlegal.calculator.timeline import TimelineBuilder
from pawlegal.calculator.urgency import (
    DEADLINE_THRESHOLDS,
    RENEWAL_THRESHOLDS,
    SHORT_DEADLINE_THRESHOLDS,
    UrgencyClassifier,
)
from pawlegal.core.clock import Clock, FixedClock, SystemClock
from pawlegal.core.config import CalculatorConfig, Settings
from pawlegal.core.dates import add_days, add_months, days_between, format_short


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------


class TestDates:
    def test_add_days_crosses_leap_day(self):
        assert add_days(date(2024, 2, 20), 30) == date(2024, 3, 21)

    def test_add_months_plain(self):
        assert add_months(date(2024, 3, 1), 1) == date(2024, 4, 1)
        assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2023, 10, 31), 4) == date(2024, 2, 29)

    def test_add_months_negative(self):
        assert add_months(date(2025, 1, 1), -4) == date(2024, 9, 1)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_months_are_not_fixed_day_counts(self):
        deposit = date(2023, 10, 31)
        assert add_months(deposit, 4) != add_days(deposit, 122)

    def test_days_between_signed(self):
        assert days_between(date(2024, 10, 1), date(2025, 1, 1)) == 92
        assert days_between(date(2024, 4, 2), date(2024, 4, 1)) == -1
        assert days_between(date(2024, 4, 1), date(2024, 4, 1)) == 0

    def test_format_short(self):
        assert format_short(date(2024, 4, 1)) == "01/04/2024"


class TestClock:
    def test_fixed_clock(self):
        clock = FixedClock(date(2024, 3, 29))
        assert clock.today() == date(2024, 3, 29)
        assert isinstance(clock, Clock)

    def test_system_clock(self):
        clock = SystemClock()
        assert isinstance(clock, Clock)
        assert isinstance(clock.today(), date)


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------


class TestTimelineBuilder:
    @pytest.fixture
    def events(self):
        return [
            Milestone("B", date(2024, 3, 15), is_deadline=True),
            Milestone("A", date(2024, 3, 1)),
            Milestone("C", date(2024, 3, 15)),
            Milestone("D", date(2024, 3, 20), is_deadline=True),
        ]

    def test_sorted_and_stable(self, events):
        timeline = TimelineBuilder().build(date(2024, 3, 10), events)
        assert [e.label for e in timeline] == ["A", "B", "C", "D"]

    def test_flags(self, events):
        timeline = {e.label: e for e in TimelineBuilder().build(date(2024, 3, 10), events)}
        assert timeline["A"].is_past
        assert not timeline["A"].is_urgent
        assert timeline["B"].is_urgent
        assert not timeline["B"].is_past
        assert not timeline["C"].is_urgent  # not a deadline
        assert not timeline["D"].is_urgent  # 10 days out

    def test_flags_recomputed_for_each_now(self, events):
        builder = TimelineBuilder()
        before = {e.label: e for e in builder.build(date(2024, 3, 10), events)}
        after = {e.label: e for e in builder.build(date(2024, 3, 16), events)}
        assert not before["B"].is_past
        assert after["B"].is_past
        assert not after["B"].is_urgent
        assert after["D"].is_urgent

    def test_urgent_boundaries(self):
        now = date(2024, 3, 10)
        events = [
            Milestone("today", now, is_deadline=True),
            Milestone("seven", date(2024, 3, 17), is_deadline=True),
            Milestone("eight", date(2024, 3, 18), is_deadline=True),
            Milestone("yesterday", date(2024, 3, 9), is_deadline=True),
        ]
        timeline = {e.label: e for e in TimelineBuilder().build(now, events)}
        assert timeline["today"].is_urgent and not timeline["today"].is_past
        assert timeline["seven"].is_urgent
        assert not timeline["eight"].is_urgent
        assert timeline["yesterday"].is_past and not timeline["yesterday"].is_urgent

    def test_custom_urgent_days(self):
        builder = TimelineBuilder(urgent_days=3)
        assert builder.urgent_days == 3
        timeline = builder.build(
            date(2024, 3, 10), [Milestone("X", date(2024, 3, 14), is_deadline=True)]
        )
        assert not timeline[0].is_urgent

    def test_empty(self):
        assert TimelineBuilder().build(date(2024, 3, 10), []) == []


# ---------------------------------------------------------------------------
# Urgency
# ---------------------------------------------------------------------------


class TestUrgencyClassifier:
    @pytest.fixture
    def classifier(self):
        return UrgencyClassifier()

    def test_renewal_boundary(self, classifier):
        assert classifier.classify(-1, RENEWAL_THRESHOLDS) == Urgency.OVERDUE
        assert classifier.classify(0, RENEWAL_THRESHOLDS) == Urgency.URGENT
        assert classifier.classify(59, RENEWAL_THRESHOLDS) == Urgency.URGENT
        assert classifier.classify(60, RENEWAL_THRESHOLDS) == Urgency.NOMINAL

    def test_deadline_tiers(self, classifier):
        assert classifier.classify(7, DEADLINE_THRESHOLDS) == Urgency.URGENT
        assert classifier.classify(8, DEADLINE_THRESHOLDS) == Urgency.WARNING
        assert classifier.classify(30, DEADLINE_THRESHOLDS) == Urgency.WARNING
        assert classifier.classify(31, DEADLINE_THRESHOLDS) == Urgency.NOMINAL

    def test_short_deadline_has_no_warning(self, classifier):
        assert classifier.classify(7, SHORT_DEADLINE_THRESHOLDS) == Urgency.URGENT
        assert classifier.classify(8, SHORT_DEADLINE_THRESHOLDS) == Urgency.NOMINAL
        assert classifier.classify(-3, SHORT_DEADLINE_THRESHOLDS) == Urgency.OVERDUE


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.calculator.implicit_refusal_months == 4
        assert settings.calculator.rapo_window_days == 30
        assert settings.calculator.taxonomy_path is None

    def test_calculator_env_override(self, monkeypatch):
        monkeypatch.setenv("PAWLEGAL_CALCULATOR_DEFAULT_DELAY_DAYS", "45")
        monkeypatch.setenv("PAWLEGAL_LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.calculator.default_delay_days == 45
        assert settings.log_level == "DEBUG"

    def test_direct_construction(self):
        config = CalculatorConfig(timeline_urgent_days=3)
        assert config.timeline_urgent_days == 3
