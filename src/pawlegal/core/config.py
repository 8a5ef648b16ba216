"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class CalculatorConfig(BaseSettings):
    """Deadline calculator configuration.

    Statutory constants are expressed in the unit the law uses (calendar
    months or days). Rule tables live in YAML under ``config/``.
    """

    model_config = {"env_prefix": "PAWLEGAL_CALCULATOR_"}

    taxonomy_path: str | None = None
    statutory_delays_path: str | None = None

    default_delay_days: int = 30
    implicit_refusal_months: int = 4
    rapo_window_days: int = 30
    commission_reply_months: int = 2
    tribunal_window_months: int = 2
    motives_reply_months: int = 1
    motives_fallback_days: int = 30
    timeline_urgent_days: int = 7


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "PAWLEGAL_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    calculator: CalculatorConfig = Field(default_factory=CalculatorConfig)
