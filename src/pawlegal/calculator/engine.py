"""Deterministic legal-deadline engine for the calculator page.

Given one case situation and the evaluation date, derives the statutory
deadlines, the ordered timeline, the urgency bucket and a single status line.
The engine holds no per-call state and never reads the wall clock, so the
same inputs always produce the same result.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pawlegal.calculator import visa
from pawlegal.calculator.models import (
    AdministrativeDecision,
    ApplicationKind,
    CaseSituation,
    ComputationResult,
    DateWindow,
    Milestone,
    PermitApplication,
    SituationKind,
    Urgency,
    VisaRefusalCase,
    VisaRefusalState,
)
from pawlegal.calculator.statutory import StatutoryTable
from pawlegal.calculator.taxonomy import PermitTaxonomy
from pawlegal.calculator.timeline import TimelineBuilder
from pawlegal.calculator.urgency import (
    DEADLINE_THRESHOLDS,
    RENEWAL_THRESHOLDS,
    SHORT_DEADLINE_THRESHOLDS,
    UrgencyClassifier,
)
from pawlegal.calculator.validation import CaseValidator, ContradictoryDatesError
from pawlegal.core.config import CalculatorConfig
from pawlegal.core.dates import add_months, days_between, format_short

logger = logging.getLogger(__name__)


class DeadlineEngine:
    """Computes deadlines, timeline and urgency for a calculator case."""

    def __init__(
        self,
        config: CalculatorConfig | None = None,
        taxonomy: PermitTaxonomy | None = None,
        statutory_table: StatutoryTable | None = None,
    ) -> None:
        self._config = config or CalculatorConfig()
        self._taxonomy = taxonomy or PermitTaxonomy(self._config.taxonomy_path)
        self._statutory = statutory_table or StatutoryTable(
            self._config.statutory_delays_path,
            default_delay_days=self._config.default_delay_days,
        )
        self._timeline = TimelineBuilder(urgent_days=self._config.timeline_urgent_days)
        self._classifier = UrgencyClassifier()
        self._validator = CaseValidator(
            implicit_refusal_months=self._config.implicit_refusal_months
        )

    @property
    def taxonomy(self) -> PermitTaxonomy:
        return self._taxonomy

    @property
    def statutory_table(self) -> StatutoryTable:
        return self._statutory

    def compute(self, situation: CaseSituation, now: date) -> ComputationResult:
        kind = SituationKind(situation.situation)

        try:
            self._validator.check(situation)
        except ContradictoryDatesError as e:
            logger.debug("Contradictory dates for %s: %s", kind.value, e.errors)
            return self._blocked(kind, now, e.errors)

        if isinstance(situation, PermitApplication):
            result = self._compute_permit(situation, now)
        elif isinstance(situation, AdministrativeDecision):
            result = self._compute_decision(situation, now)
        elif isinstance(situation, VisaRefusalCase):
            result = self._compute_visa(situation, now)
        else:
            raise TypeError(f"Unsupported case situation {type(situation).__name__!r}")

        logger.debug(
            "Computed %s on %s: state=%s urgency=%s days_remaining=%s",
            kind.value,
            now.isoformat(),
            result.state.value if result.state else None,
            result.urgency.value,
            result.days_remaining,
        )
        return result

    # ------------------------------------------------------------------
    # Permit filing and renewal
    # ------------------------------------------------------------------

    def _compute_permit(self, case: PermitApplication, now: date) -> ComputationResult:
        kind = SituationKind.NEW_OR_RENEWAL
        category = case.permit_category

        errors = self._taxonomy.validate(category)
        if errors:
            return self._blocked(kind, now, errors)

        if category.precise_type is None:
            return self._result(
                kind,
                now,
                [],
                headline="Sélectionnez le type précis de titre de séjour pour obtenir le calcul.",
                missing_fields=["permit_category.precise_type"],
            )

        leads = self._taxonomy.lead_times(category.precise_type)
        label = self._taxonomy.label_of(category.precise_type)
        info = self._taxonomy.info_of(category.precise_type)

        if case.application_kind is ApplicationKind.FIRST:
            return self._result(
                kind,
                now,
                [],
                headline=(
                    f"Vous pouvez déposer votre première demande ({label}) à tout moment. "
                    f"Délai recommandé : déposez au moins {leads.first_application_months} "
                    "mois avant la date souhaitée."
                ),
                permit_info=info,
            )

        expiration = case.current_expiration_date
        if expiration is None:
            return self._result(
                kind,
                now,
                [],
                headline="Indiquez la date d'expiration de votre titre actuel pour calculer le délai de renouvellement.",
                validation_errors=[
                    "current_expiration_date: La date d'expiration est requise pour un renouvellement."
                ],
                missing_fields=["current_expiration_date"],
                permit_info=info,
            )

        window = DateWindow(
            start=add_months(expiration, -leads.renewal_max_months),
            end=add_months(expiration, -leads.renewal_min_months),
        )
        days = days_between(now, expiration)
        urgency = self._classifier.classify(days, RENEWAL_THRESHOLDS)

        if urgency is Urgency.OVERDUE:
            headline = (
                f"Votre titre a expiré il y a {abs(days)} jour(s). "
                "Déposez immédiatement votre demande de renouvellement."
            )
        elif urgency is Urgency.URGENT:
            headline = (
                f"Votre titre expire dans {days} jour(s). "
                "Déposez votre demande de renouvellement dès maintenant."
            )
        else:
            headline = (
                f"Votre titre expire dans {days} jour(s). Période recommandée pour déposer : "
                f"{format_short(window.start)} au {format_short(window.end)}."
            )

        milestones: list[Milestone] = []
        if case.current_delivery_date is not None:
            milestones.append(Milestone("Date de délivrance du titre actuel", case.current_delivery_date))
        milestones.extend(
            [
                Milestone("Début de la période recommandée de dépôt", window.start),
                Milestone("Fin de la période recommandée de dépôt", window.end),
                Milestone("Expiration du titre actuel", expiration, is_deadline=True),
            ]
        )
        return self._result(
            kind,
            now,
            milestones,
            days_remaining=days,
            urgency=urgency,
            headline=headline,
            deadline_date=expiration,
            recommended_window=window,
            permit_info=info,
        )

    # ------------------------------------------------------------------
    # Litigation against an administrative decision
    # ------------------------------------------------------------------

    def _compute_decision(self, case: AdministrativeDecision, now: date) -> ComputationResult:
        delay = self._statutory.lookup(case.decision_kind)
        deadline = delay.deadline_from(case.decision_date)
        days = days_between(now, deadline)
        urgency = self._classifier.classify(days, SHORT_DEADLINE_THRESHOLDS)

        if urgency is Urgency.OVERDUE:
            status = (
                f"Le délai de recours est dépassé de {abs(days)} jour(s). "
                "Consultez un avocat rapidement."
            )
        elif urgency is Urgency.URGENT:
            status = f"URGENT : il reste {days} jour(s) pour introduire votre recours."
        else:
            status = f"Vous avez encore {days} jour(s) pour introduire votre recours."

        headline = (
            f"{status} Date limite : {format_short(deadline)} "
            f"({delay.describe()} à compter de la décision). Recours : {delay.recourse}."
        )
        if delay.default_applied:
            headline += (
                f" Type de décision non reconnu : délai par défaut de {delay.describe()} appliqué."
            )

        milestones = [
            Milestone("Date de la décision", case.decision_date),
            Milestone("Date limite du recours", deadline, is_deadline=True),
        ]
        return self._result(
            SituationKind.DECISION_LITIGATION,
            now,
            milestones,
            days_remaining=days,
            urgency=urgency,
            headline=headline,
            deadline_date=deadline,
            recourse_type=delay.recourse,
            default_applied=delay.default_applied,
        )

    # ------------------------------------------------------------------
    # Visa refusal appeal
    # ------------------------------------------------------------------

    def _compute_visa(self, case: VisaRefusalCase, now: date) -> ComputationResult:
        progress = visa.advance(case, now, self._config)
        months = self._config.implicit_refusal_months
        prefix = f"RAPO déposé le {format_short(progress.rapo)}. " if progress.rapo else ""
        fields: dict[str, Any] = {
            "state": progress.state,
            "missing_fields": progress.missing_fields,
            "validation_errors": progress.validation_errors,
            "visa_nature": case.visa_nature,
            "consulate": case.consulate,
        }

        match progress.state:
            case VisaRefusalState.NO_RECOURSE:
                overrun = days_between(progress.implicit_refusal, now)
                fields.update(
                    days_remaining=-overrun,
                    urgency=Urgency.OVERDUE,
                    deadline_date=progress.implicit_refusal,
                    headline=(
                        f"Plus de {months} mois se sont écoulés depuis la confirmation du dépôt "
                        f"({overrun} jour(s) de retard depuis le "
                        f"{format_short(progress.implicit_refusal)}). En principe, aucun recours "
                        "n'est plus possible. Si vous avez déposé un RAPO avant la fin du délai, "
                        "indiquez sa date de dépôt pour reprendre le calcul."
                    ),
                )

            case VisaRefusalState.AWAITING_REFUSAL_TYPE:
                if "explicit_notification_date" in progress.missing_fields:
                    headline = "Indiquez la date de notification du refus explicite."
                else:
                    headline = (
                        "Indiquez si le refus de visa est explicite (décision notifiée) "
                        "ou implicite (silence de l'administration)."
                    )
                fields.update(headline=headline)

            case VisaRefusalState.AWAITING_RAPO_FILING:
                window = progress.rapo_window
                if window is None:
                    raise ValueError(f"State {progress.state.value!r} reached without a RAPO window")
                days = days_between(now, window.end)
                urgency = self._classifier.classify(days, SHORT_DEADLINE_THRESHOLDS)
                deadline = format_short(window.end)
                if urgency is Urgency.OVERDUE:
                    headline = (
                        f"Le délai du RAPO est dépassé de {abs(days)} jour(s). "
                        f"La date limite était le {deadline}."
                    )
                elif urgency is Urgency.URGENT:
                    headline = (
                        f"URGENT : il reste {days} jour(s) pour déposer le RAPO "
                        f"(date limite : {deadline})."
                    )
                else:
                    headline = f"Vous avez {days} jour(s) pour déposer le RAPO, jusqu'au {deadline}."
                fields.update(
                    days_remaining=days,
                    urgency=urgency,
                    deadline_date=window.end,
                    headline=headline,
                )

            case VisaRefusalState.RAPO_FILED_AWAITING_COMMISSION_REPLY:
                commission = progress.commission
                if commission is None or "rapo_response_date" in progress.missing_fields:
                    fields.update(headline=prefix + "Indiquez la date de réponse de la commission.")
                else:
                    days = days_between(now, commission)
                    if days < 0:
                        status = (
                            "En attente de réponse de la commission (délai dépassé de "
                            f"{abs(days)} jour(s)). Vous devez maintenant choisir : saisir le "
                            "tribunal ou demander la communication des motifs."
                        )
                    else:
                        status = (
                            f"En attente de réponse de la commission ({days} jour(s) restants, "
                            f"jusqu'au {format_short(commission)}). Sans réponse à cette date, "
                            "vous devrez choisir entre saisir le tribunal et demander la "
                            "communication des motifs."
                        )
                    fields.update(
                        days_remaining=days,
                        urgency=self._classifier.classify(days, SHORT_DEADLINE_THRESHOLDS),
                        deadline_date=commission,
                        headline=prefix + status,
                    )

            case VisaRefusalState.MOTIVES_REQUESTED_AWAITING_REPLY:
                if progress.tribunal_window is None:
                    fields.update(
                        headline=prefix
                        + "Indiquez la date de votre demande de communication des motifs."
                    )
                else:
                    presumed = (
                        "Motifs non communiqués à ce jour : refus de communication présumé. "
                        if progress.motives_presumed_refused
                        else ""
                    )
                    fields.update(self._tribunal_fields(progress.tribunal_window, prefix + presumed, now))

            case VisaRefusalState.TRIBUNAL_DEADLINE_SET:
                if progress.tribunal_window is None:
                    raise ValueError(f"State {progress.state.value!r} reached without a tribunal window")
                fields.update(self._tribunal_fields(progress.tribunal_window, prefix, now))

        return self._result(SituationKind.VISA_REFUSAL, now, progress.milestones, **fields)

    def _tribunal_fields(self, window: DateWindow, prefix: str, now: date) -> dict[str, Any]:
        days = days_between(now, window.end)
        urgency = self._classifier.classify(days, DEADLINE_THRESHOLDS)
        deadline = format_short(window.end)
        if urgency is Urgency.OVERDUE:
            status = (
                f"Le délai du recours tribunal est dépassé de {abs(days)} jour(s) "
                f"(date limite : {deadline})."
            )
        elif urgency is Urgency.URGENT:
            status = f"URGENT : il reste {days} jour(s) pour saisir le tribunal (date limite : {deadline})."
        else:
            status = f"Délai tribunal : {days} jour(s) restants, jusqu'au {deadline}."
        return {
            "days_remaining": days,
            "urgency": urgency,
            "deadline_date": window.end,
            "tribunal_window": window,
            "headline": prefix + status,
        }

    # ------------------------------------------------------------------
    # Result assembly
    # ------------------------------------------------------------------

    def _blocked(self, kind: SituationKind, now: date, errors: list[str]) -> ComputationResult:
        return self._result(
            kind,
            now,
            [],
            headline="Certaines informations sont incohérentes. Corrigez-les pour obtenir le calcul.",
            validation_errors=errors,
        )

    def _result(
        self,
        kind: SituationKind,
        now: date,
        milestones: list[Milestone],
        **fields,
    ) -> ComputationResult:
        return ComputationResult(
            situation=kind,
            timeline=self._timeline.build(now, milestones),
            **fields,
        )
