"""Calculator API router: deadline computation, taxonomy, info sheets and prefill."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from pawlegal.calculator.engine import DeadlineEngine
from pawlegal.calculator.models import (
    VISA_NATURE_LABELS,
    CaseSituation,
    PermitApplication,
    PermitProfile,
)
from pawlegal.calculator.prefill import prefill_application
from pawlegal.core.clock import Clock


router = APIRouter()


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ComputeRequest(BaseModel):
    """Request body for a deadline computation."""

    situation: CaseSituation
    now: date | None = None


class PrefillRequest(BaseModel):
    """Request body for prefilling a permit application from a profile."""

    application: PermitApplication
    profile: PermitProfile | None = None


# ---------------------------------------------------------------------------
# Helpers to get services from app state
# ---------------------------------------------------------------------------


def _get_deadline_engine(request: Request) -> DeadlineEngine:
    engine = getattr(request.app.state, "deadline_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Deadline engine not available")
    return engine


def _get_clock(request: Request) -> Clock:
    clock = getattr(request.app.state, "clock", None)
    if clock is None:
        raise HTTPException(status_code=503, detail="Clock not available")
    return clock


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/api/calculator/compute")
async def api_compute(body: ComputeRequest, request: Request) -> dict[str, Any]:
    """Compute deadlines, timeline and urgency for one case situation."""
    engine = _get_deadline_engine(request)
    now = body.now or _get_clock(request).today()
    result = engine.compute(body.situation, now)
    return result.model_dump(mode="json")


@router.post("/api/calculator/prefill")
async def api_prefill(body: PrefillRequest) -> dict[str, Any]:
    """Fill unset permit fields from the client's profile."""
    application = prefill_application(body.application, body.profile)
    return application.model_dump(mode="json")


@router.get("/api/calculator/taxonomy/{level}")
async def api_taxonomy_children(
    level: str, request: Request, parent: str | None = None
) -> list[dict[str, Any]]:
    """List taxonomy options at ``level`` under ``parent``."""
    engine = _get_deadline_engine(request)
    try:
        options = engine.taxonomy.children_of(level, parent)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [option.model_dump() for option in options]


@router.get("/api/calculator/decision-kinds")
async def api_decision_kinds(request: Request) -> list[dict[str, Any]]:
    """List the known decision kinds with their statutory delay."""
    engine = _get_deadline_engine(request)
    return [
        {
            "kind": delay.kind,
            "label": delay.label,
            "amount": delay.amount,
            "unit": delay.unit.value,
            "recourse": delay.recourse,
        }
        for delay in engine.statutory_table.entries()
    ]


@router.get("/api/calculator/visa-natures")
async def api_visa_natures() -> list[dict[str, str]]:
    """List the visa kinds accepted for a visa refusal case."""
    return [{"value": nature.value, "label": label} for nature, label in VISA_NATURE_LABELS.items()]


@router.get("/api/calculator/permit-info/{precise_type}")
async def api_permit_info(precise_type: str, request: Request) -> dict[str, Any]:
    """Information sheet for a precise permit type."""
    engine = _get_deadline_engine(request)
    try:
        info = engine.taxonomy.info_of(precise_type)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if info is None:
        raise HTTPException(
            status_code=404, detail=f"No information sheet for permit type {precise_type!r}"
        )
    return info.model_dump()
