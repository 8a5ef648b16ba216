"""Data models for the deadline calculator.

Every model is built fresh from form state for a single computation and
discarded afterwards; none of them is persisted.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, Field, TypeAdapter


class SituationKind(StrEnum):
    """The three situations the calculator handles."""

    NEW_OR_RENEWAL = "new_or_renewal"
    DECISION_LITIGATION = "decision_litigation"
    VISA_REFUSAL = "visa_refusal"


class ApplicationKind(StrEnum):
    FIRST = "first"
    RENEWAL = "renewal"


class RefusalType(StrEnum):
    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class SilenceAction(StrEnum):
    """What the applicant does once the appeals commission stays silent."""

    GO_TO_TRIBUNAL = "go_to_tribunal"
    REQUEST_MOTIVES = "request_motives"


class Urgency(StrEnum):
    """Banner level of a computation. ``NONE`` means nothing to act on yet."""

    OVERDUE = "overdue"
    URGENT = "urgent"
    WARNING = "warning"
    NOMINAL = "nominal"
    NONE = "none"


class VisaNature(StrEnum):
    """Kinds of visa an applicant may have been refused."""

    SHORT_STAY = "visa_court_sejour"
    LONG_STAY = "visa_long_sejour"
    TRANSIT = "visa_transit"
    STUDENT = "visa_etudiant"
    WORKER = "visa_travailleur"
    FAMILY = "visa_familial"
    TALENT = "visa_talent"
    OTHER = "autre"


VISA_NATURE_LABELS: dict[VisaNature, str] = {
    VisaNature.SHORT_STAY: "Visa de court séjour (Schengen)",
    VisaNature.LONG_STAY: "Visa de long séjour",
    VisaNature.TRANSIT: "Visa de transit",
    VisaNature.STUDENT: "Visa étudiant",
    VisaNature.WORKER: "Visa travailleur",
    VisaNature.FAMILY: "Visa vie privée et familiale",
    VisaNature.TALENT: "Visa Passeport Talent",
    VisaNature.OTHER: "Autre type de visa",
}


class VisaRefusalState(StrEnum):
    """Procedural states of a visa refusal appeal."""

    AWAITING_REFUSAL_TYPE = "awaiting_refusal_type"
    AWAITING_RAPO_FILING = "awaiting_rapo_filing"
    RAPO_FILED_AWAITING_COMMISSION_REPLY = "rapo_filed_awaiting_commission_reply"
    MOTIVES_REQUESTED_AWAITING_REPLY = "motives_requested_awaiting_reply"
    TRIBUNAL_DEADLINE_SET = "tribunal_deadline_set"
    NO_RECOURSE = "no_recourse"


# ---------------------------------------------------------------------------
# Case situations
# ---------------------------------------------------------------------------


class PermitCategory(BaseModel):
    """Selection in the three-level permit taxonomy. Lower levels may be unset."""

    motif: str | None = None
    subcategory: str | None = None
    precise_type: str | None = None


class PermitApplication(BaseModel):
    """First filing or renewal of a residence permit."""

    situation: Literal["new_or_renewal"] = "new_or_renewal"
    permit_category: PermitCategory = Field(default_factory=PermitCategory)
    application_kind: ApplicationKind = ApplicationKind.FIRST
    current_expiration_date: date | None = None
    current_delivery_date: date | None = None


class AdministrativeDecision(BaseModel):
    """An unfavourable administrative decision to be contested."""

    situation: Literal["decision_litigation"] = "decision_litigation"
    decision_kind: str
    decision_date: date


class VisaRefusalCase(BaseModel):
    """Facts about a visa refusal, filled in as events happen."""

    situation: Literal["visa_refusal"] = "visa_refusal"
    visa_nature: VisaNature | None = None
    consulate: str | None = None
    deposit_confirmation_date: date
    refusal_type: RefusalType | None = None
    explicit_notification_date: date | None = None
    rapo_filing_date: date | None = None
    rapo_response_received: bool = False
    rapo_response_date: date | None = None
    chosen_action_on_silence: SilenceAction | None = None
    motives_request_date: date | None = None
    motives_received_date: date | None = None


CaseSituation = Annotated[
    Union[PermitApplication, AdministrativeDecision, VisaRefusalCase],
    Field(discriminator="situation"),
]

case_situation_adapter: TypeAdapter[CaseSituation] = TypeAdapter(CaseSituation)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class Milestone(NamedTuple):
    """A dated procedural step handed to the timeline builder."""

    label: str
    date: date
    is_deadline: bool = False


class TimelineEvent(BaseModel):
    """A milestone annotated relative to the evaluation date."""

    label: str
    date: date
    is_deadline: bool
    is_urgent: bool
    is_past: bool


class DateWindow(BaseModel):
    """Inclusive range of dates in which an action may be taken."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class PermitInfo(BaseModel):
    """Information sheet for a precise permit type."""

    description: str
    duration_years: list[int] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)


class ComputationResult(BaseModel):
    """Everything the calculator page needs to render one computation."""

    situation: SituationKind
    timeline: list[TimelineEvent] = Field(default_factory=list)
    days_remaining: int | None = None
    urgency: Urgency = Urgency.NONE
    headline: str = ""
    validation_errors: list[str] = Field(default_factory=list)

    state: VisaRefusalState | None = None
    deadline_date: date | None = None
    recourse_type: str | None = None
    default_applied: bool = False
    recommended_window: DateWindow | None = None
    tribunal_window: DateWindow | None = None
    missing_fields: list[str] = Field(default_factory=list)

    permit_info: PermitInfo | None = None
    visa_nature: VisaNature | None = None
    consulate: str | None = None


class PermitProfile(BaseModel):
    """Permit facts stored on a client's profile, used to prefill the form."""

    permit_category: PermitCategory | None = None
    delivery_date: date | None = None
    expiration_date: date | None = None
