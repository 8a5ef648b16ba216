"""Cross-field date validation for calculator cases.

Only contradictions are reported here. A date that has not been supplied yet
is never an error at this level; the engine decides what is missing for the
branch it can reach.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pawlegal.calculator.models import (
    AdministrativeDecision,
    PermitApplication,
    RefusalType,
    VisaRefusalCase,
)
from pawlegal.core.dates import add_months, format_short


class ContradictoryDatesError(ValueError):
    """Raised when supplied dates cannot all be true at once."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


# (earlier field, later field, message). The message is attached to the later field.
_DATE_ORDER_RULES: dict[type, list[tuple[str, str, str]]] = {
    PermitApplication: [
        (
            "current_delivery_date",
            "current_expiration_date",
            "La date d'expiration doit être postérieure à la date de délivrance.",
        ),
    ],
    AdministrativeDecision: [],
    VisaRefusalCase: [
        (
            "deposit_confirmation_date",
            "explicit_notification_date",
            "La notification du refus ne peut pas précéder la confirmation du dépôt.",
        ),
        (
            "deposit_confirmation_date",
            "rapo_filing_date",
            "Le RAPO ne peut pas être déposé avant la confirmation du dépôt.",
        ),
        (
            "rapo_filing_date",
            "rapo_response_date",
            "La réponse au RAPO ne peut pas précéder son dépôt.",
        ),
        (
            "rapo_filing_date",
            "motives_request_date",
            "La demande de motifs ne peut pas précéder le dépôt du RAPO.",
        ),
        (
            "motives_request_date",
            "motives_received_date",
            "La réception des motifs ne peut pas précéder leur demande.",
        ),
    ],
}


class CaseValidator:
    """Checks date ordering between the fields of a case."""

    def __init__(self, implicit_refusal_months: int = 4) -> None:
        self._implicit_refusal_months = implicit_refusal_months

    def contradictions(self, case: Any) -> list[str]:
        errors: list[str] = []
        for earlier, later, message in _DATE_ORDER_RULES.get(type(case), []):
            first = getattr(case, earlier)
            second = getattr(case, later)
            if first is not None and second is not None and first > second:
                errors.append(f"{later}: {message}")

        if isinstance(case, VisaRefusalCase):
            errors.extend(self._check_rapo_after_refusal(case))
        return errors

    def check(self, case: Any) -> None:
        errors = self.contradictions(case)
        if errors:
            raise ContradictoryDatesError(errors)

    def _check_rapo_after_refusal(self, case: VisaRefusalCase) -> list[str]:
        if case.rapo_filing_date is None:
            return []

        refusal: date | None = None
        if case.refusal_type is RefusalType.IMPLICIT:
            refusal = add_months(case.deposit_confirmation_date, self._implicit_refusal_months)
        elif case.refusal_type is RefusalType.EXPLICIT:
            refusal = case.explicit_notification_date

        if refusal is not None and case.rapo_filing_date < refusal:
            return [
                "rapo_filing_date: Le RAPO ne peut pas être déposé avant le refus "
                f"qu'il conteste ({format_short(refusal)})."
            ]
        return []
