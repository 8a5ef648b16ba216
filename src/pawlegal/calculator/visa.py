"""State machine for visa refusal appeals.

The case is filled in as real-world events happen (refusal, RAPO filing,
commission reply, request for motives...). :func:`advance` applies the
transition rules in order over the facts known so far and returns the
reached state together with every date it could resolve. Wording and
urgency are left to the engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from pawlegal.calculator.models import (
    DateWindow,
    Milestone,
    RefusalType,
    SilenceAction,
    VisaRefusalCase,
    VisaRefusalState,
)
from pawlegal.core.config import CalculatorConfig
from pawlegal.core.dates import add_days, add_months

logger = logging.getLogger(__name__)

COMMISSION_DEADLINE_LABEL = "Date limite de réponse de la commission"


@dataclass
class VisaProgress:
    """Reached state and resolved dates of a visa refusal case."""

    state: VisaRefusalState
    implicit_refusal: date
    milestones: list[Milestone] = field(default_factory=list)
    refusal: date | None = None
    rapo_window: DateWindow | None = None
    rapo: date | None = None
    commission: date | None = None
    motives_deadline: date | None = None
    tribunal_window: DateWindow | None = None
    motives_presumed_refused: bool = False
    missing_fields: list[str] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)


def _tribunal_window(start: date, config: CalculatorConfig) -> DateWindow:
    return DateWindow(
        start=add_days(start, 1),
        end=add_months(start, config.tribunal_window_months),
    )


def advance(case: VisaRefusalCase, now: date, config: CalculatorConfig) -> VisaProgress:
    """Apply the transition rules to ``case`` as known on ``now``."""
    deposit = case.deposit_confirmation_date
    progress = VisaProgress(
        state=VisaRefusalState.AWAITING_REFUSAL_TYPE,
        implicit_refusal=add_months(deposit, config.implicit_refusal_months),
        milestones=[Milestone("Date de confirmation du dépôt", deposit)],
    )

    # Silence window closed and nothing else known: no recourse left.
    if now > progress.implicit_refusal and case.refusal_type is None and case.rapo_filing_date is None:
        progress.state = VisaRefusalState.NO_RECOURSE
        progress.milestones.append(
            Milestone(
                f"Fin du délai de {config.implicit_refusal_months} mois après le dépôt",
                progress.implicit_refusal,
                is_deadline=True,
            )
        )
        return progress

    if case.refusal_type is None:
        progress.missing_fields.append("refusal_type")
        return progress

    if case.refusal_type is RefusalType.EXPLICIT:
        if case.explicit_notification_date is None:
            progress.missing_fields.append("explicit_notification_date")
            progress.validation_errors.append(
                "explicit_notification_date: La date de notification est requise pour un refus explicite."
            )
            return progress
        progress.refusal = case.explicit_notification_date
        progress.milestones.append(Milestone("Date de notification du refus", progress.refusal))
    else:
        progress.refusal = progress.implicit_refusal
        progress.milestones.append(Milestone("Naissance du refus implicite", progress.refusal))

    rapo_window = DateWindow(
        start=add_days(progress.refusal, 1),
        end=add_days(progress.refusal, config.rapo_window_days),
    )

    if case.rapo_filing_date is None:
        progress.state = VisaRefusalState.AWAITING_RAPO_FILING
        progress.rapo_window = rapo_window
        progress.milestones.append(Milestone("Début possible du RAPO", rapo_window.start))
        progress.milestones.append(Milestone("Date limite du RAPO", rapo_window.end, is_deadline=True))
        return progress

    progress.rapo = case.rapo_filing_date
    if progress.rapo > rapo_window.end:
        # A late RAPO still reopens the chain, as the practice observes it.
        logger.debug("RAPO filed on %s after its window closed on %s", progress.rapo, rapo_window.end)

    progress.commission = add_months(progress.rapo, config.commission_reply_months)
    progress.milestones.append(Milestone("Date de dépôt du RAPO", progress.rapo))
    progress.state = VisaRefusalState.RAPO_FILED_AWAITING_COMMISSION_REPLY

    if case.rapo_response_received:
        progress.milestones.append(Milestone(COMMISSION_DEADLINE_LABEL, progress.commission))
        if case.rapo_response_date is None:
            progress.missing_fields.append("rapo_response_date")
            progress.validation_errors.append(
                "rapo_response_date: La date de réponse est requise lorsqu'une réponse a été reçue."
            )
            return progress
        progress.state = VisaRefusalState.TRIBUNAL_DEADLINE_SET
        progress.milestones.append(Milestone("Date de réponse du RAPO", case.rapo_response_date))
        progress.tribunal_window = _tribunal_window(case.rapo_response_date, config)
        progress.milestones.append(
            Milestone("Début possible du recours tribunal", progress.tribunal_window.start)
        )

    elif case.chosen_action_on_silence is SilenceAction.GO_TO_TRIBUNAL:
        progress.milestones.append(Milestone(COMMISSION_DEADLINE_LABEL, progress.commission))
        progress.state = VisaRefusalState.TRIBUNAL_DEADLINE_SET
        progress.tribunal_window = _tribunal_window(progress.commission, config)
        progress.milestones.append(
            Milestone(
                "Début possible du recours tribunal (pas de réponse)",
                progress.tribunal_window.start,
            )
        )

    elif (
        case.chosen_action_on_silence is SilenceAction.REQUEST_MOTIVES
        or case.motives_request_date is not None
        or case.motives_received_date is not None
    ):
        progress.milestones.append(Milestone(COMMISSION_DEADLINE_LABEL, progress.commission))
        progress.state = VisaRefusalState.MOTIVES_REQUESTED_AWAITING_REPLY
        _advance_motives(case, progress, config)

    else:
        progress.milestones.append(
            Milestone(COMMISSION_DEADLINE_LABEL, progress.commission, is_deadline=True)
        )
        if now > progress.commission:
            progress.missing_fields.append("chosen_action_on_silence")

    if progress.tribunal_window is not None:
        progress.milestones.append(
            Milestone("Date limite du recours tribunal", progress.tribunal_window.end, is_deadline=True)
        )
    return progress


def _advance_motives(case: VisaRefusalCase, progress: VisaProgress, config: CalculatorConfig) -> None:
    request = case.motives_request_date
    if request is None:
        progress.missing_fields.append("motives_request_date")
        progress.validation_errors.append(
            "motives_request_date: La date de demande des motifs est requise."
        )
        return

    received = case.motives_received_date
    progress.motives_deadline = add_months(request, config.motives_reply_months)
    progress.milestones.append(Milestone("Date de demande de communication des motifs", request))
    progress.milestones.append(
        Milestone("Date limite de réponse (motifs)", progress.motives_deadline, is_deadline=received is None)
    )

    if received is not None:
        progress.state = VisaRefusalState.TRIBUNAL_DEADLINE_SET
        progress.milestones.append(Milestone("Date de réception des motifs", received))
        progress.tribunal_window = _tribunal_window(received, config)
        progress.milestones.append(
            Milestone("Début possible du recours tribunal", progress.tribunal_window.start)
        )
        return

    # No motives received: refusal to communicate them is presumed.
    progress.motives_presumed_refused = True
    progress.tribunal_window = DateWindow(
        start=add_days(request, config.motives_fallback_days),
        end=add_months(request, config.tribunal_window_months),
    )
    progress.milestones.append(
        Milestone(
            "Début possible du recours tribunal (motifs non reçus)",
            progress.tribunal_window.start,
        )
    )
