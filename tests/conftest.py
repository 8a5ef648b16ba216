"""Shared test fixtures."""

from __future__ import annotations

from datetime import date

import pytest

from pawlegal.calculator.engine import DeadlineEngine
from pawlegal.calculator.models import PermitCategory
from pawlegal.calculator.taxonomy import PermitTaxonomy


@pytest.fixture
def salarie_category() -> PermitCategory:
    """Fully selected category for the standard employee permit."""
    return PermitCategory(
        motif="professionnel",
        subcategory="activite_salariee_standard",
        precise_type="salarie",
    )


@pytest.fixture(scope="session")
def taxonomy() -> PermitTaxonomy:
    return PermitTaxonomy()


@pytest.fixture(scope="session")
def engine(taxonomy) -> DeadlineEngine:
    return DeadlineEngine(taxonomy=taxonomy)


@pytest.fixture
def today() -> date:
    return date(2024, 3, 29)
