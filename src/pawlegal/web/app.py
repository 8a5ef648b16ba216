"""FastAPI application exposing the PawLegal deadline calculator."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from pawlegal.calculator.engine import DeadlineEngine
from pawlegal.core.clock import Clock, SystemClock
from pawlegal.core.config import Settings
from pawlegal.web.calculator_router import router as calculator_router


# --- Response models ---


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"


# --- Application factory ---


def create_app(
    settings: Settings | None = None,
    deadline_engine: DeadlineEngine | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with a fixed clock or a custom engine.

    Args:
        settings: Application settings. Defaults to Settings().
        deadline_engine: Optional pre-built DeadlineEngine.
        clock: Source of today's date. Defaults to the system clock.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("pawlegal").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="PawLegal Calculator",
        description="Statutory deadline calculator for immigration cases",
        version="0.1.0",
        debug=settings.debug,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if deadline_engine is None:
        deadline_engine = DeadlineEngine(config=settings.calculator)

    app.state.settings = settings
    app.state.deadline_engine = deadline_engine
    app.state.clock = clock or SystemClock()

    app.include_router(calculator_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="pawlegal-calculator",
        )

    return app
