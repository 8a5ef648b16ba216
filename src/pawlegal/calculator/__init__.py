"""Legal-deadline calculator.

Derives statutory deadlines, timelines and urgency for residence permit
filings, litigation against administrative decisions and visa refusal
appeals.
"""

from pawlegal.calculator.engine import DeadlineEngine
from pawlegal.calculator.models import (
    AdministrativeDecision,
    CaseSituation,
    ComputationResult,
    PermitApplication,
    VisaRefusalCase,
)
from pawlegal.calculator.statutory import StatutoryTable
from pawlegal.calculator.taxonomy import PermitTaxonomy

__all__ = [
    "AdministrativeDecision",
    "CaseSituation",
    "ComputationResult",
    "DeadlineEngine",
    "PermitApplication",
    "PermitTaxonomy",
    "StatutoryTable",
    "VisaRefusalCase",
]
