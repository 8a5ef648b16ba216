"""Statutory appeal delays keyed by administrative decision kind."""

from __future__ import annotations

import logging
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from pawlegal.core.dates import add_days, add_months

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "statutory_delays.yml"

DEFAULT_RECOURSE = "Recours contentieux devant le tribunal administratif"


class DelayUnit(StrEnum):
    DAYS = "days"
    MONTHS = "months"


class StatutoryDelay(BaseModel):
    """Delay the law allows to contest one kind of decision."""

    kind: str
    label: str
    amount: int
    unit: DelayUnit = DelayUnit.DAYS
    recourse: str = DEFAULT_RECOURSE
    default_applied: bool = False

    def deadline_from(self, start: date) -> date:
        if self.unit is DelayUnit.MONTHS:
            return add_months(start, self.amount)
        return add_days(start, self.amount)

    def describe(self) -> str:
        unit = "mois" if self.unit is DelayUnit.MONTHS else "jours"
        return f"{self.amount} {unit}"


class StatutoryTable:
    """Maps decision kinds to their appeal delay.

    Unknown kinds resolve to the configured default and come back with
    ``default_applied`` set, so callers can surface the fallback.
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        default_delay_days: int | None = None,
    ) -> None:
        self._config_path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
        self._delays: dict[str, StatutoryDelay] = {}
        self._default_amount = 30
        self._default_unit = DelayUnit.DAYS
        self._default_recourse = DEFAULT_RECOURSE
        self._load_config()
        if default_delay_days is not None:
            self._default_amount = default_delay_days
            self._default_unit = DelayUnit.DAYS

    def _load_config(self) -> None:
        with open(self._config_path) as fh:
            raw = yaml.safe_load(fh) or {}

        default: dict[str, Any] = raw.get("default") or {}
        self._default_amount = int(default.get("amount", self._default_amount))
        self._default_unit = DelayUnit(default.get("unit", self._default_unit))
        self._default_recourse = default.get("recourse", self._default_recourse)

        for kind, data in (raw.get("decisions") or {}).items():
            kind = str(kind)
            self._delays[kind] = StatutoryDelay(
                kind=kind,
                label=data.get("label", kind),
                amount=data["amount"],
                unit=DelayUnit(data.get("unit", "days")),
                recourse=data.get("recourse", self._default_recourse),
            )

    def lookup(self, decision_kind: str) -> StatutoryDelay:
        delay = self._delays.get(decision_kind)
        if delay is not None:
            return delay

        logger.warning(
            "Unknown decision kind %r; applying default delay of %d %s",
            decision_kind,
            self._default_amount,
            self._default_unit.value,
        )
        return StatutoryDelay(
            kind=decision_kind,
            label=decision_kind,
            amount=self._default_amount,
            unit=self._default_unit,
            recourse=self._default_recourse,
            default_applied=True,
        )

    def __contains__(self, decision_kind: object) -> bool:
        return decision_kind in self._delays

    def entries(self) -> list[StatutoryDelay]:
        return list(self._delays.values())
