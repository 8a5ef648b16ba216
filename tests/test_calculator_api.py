"""Tests for the calculator API router."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from pawlegal.core.clock import FixedClock
from pawlegal.core.config import Settings
from pawlegal.web.app import create_app


@pytest.fixture
def app(engine, today):
    return create_app(settings=Settings(), deadline_engine=engine, clock=FixedClock(today))


@pytest.fixture
def client(app):
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["service"] == "pawlegal-calculator"


class TestComputeEndpoint:
    def test_decision_uses_app_clock(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "decision_litigation",
                    "decision_kind": "refus_cnda",
                    "decision_date": "2024-03-01",
                }
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["situation"] == "decision_litigation"
        assert data["deadline_date"] == "2024-04-01"
        assert data["days_remaining"] == 3
        assert data["urgency"] == "urgent"
        assert len(data["timeline"]) == 2

    def test_explicit_now_overrides_clock(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "new_or_renewal",
                    "permit_category": {
                        "motif": "professionnel",
                        "subcategory": "activite_salariee_standard",
                        "precise_type": "salarie",
                    },
                    "application_kind": "renewal",
                    "current_expiration_date": "2025-01-01",
                },
                "now": "2024-10-01",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["days_remaining"] == 92
        assert data["urgency"] == "nominal"
        assert data["recommended_window"] == {"start": "2024-09-01", "end": "2024-11-01"}

    def test_visa_state_serialized(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {"situation": "visa_refusal", "deposit_confirmation_date": "2024-01-10"},
                "now": "2024-06-01",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "no_recourse"
        assert data["days_remaining"] == -22

    def test_contradiction_reported_not_rejected(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "new_or_renewal",
                    "application_kind": "renewal",
                    "current_delivery_date": "2025-02-01",
                    "current_expiration_date": "2025-01-01",
                }
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["validation_errors"]
        assert data["urgency"] == "none"

    def test_unknown_situation_rejected(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={"situation": {"situation": "naturalisation"}},
        )
        assert resp.status_code == 422

    def test_missing_required_date_rejected(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={"situation": {"situation": "decision_litigation", "decision_kind": "oqtf"}},
        )
        assert resp.status_code == 422


    def test_visa_details_echoed(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "visa_refusal",
                    "visa_nature": "visa_talent",
                    "consulate": "Consulat de France à Dakar",
                    "deposit_confirmation_date": "2024-01-10",
                },
                "now": "2024-03-01",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["visa_nature"] == "visa_talent"
        assert data["consulate"] == "Consulat de France à Dakar"

    def test_unknown_visa_nature_rejected(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "visa_refusal",
                    "visa_nature": "pizza",
                    "deposit_confirmation_date": "2024-01-10",
                }
            },
        )
        assert resp.status_code == 422

    def test_renewal_carries_permit_info(self, client):
        resp = client.post(
            "/api/calculator/compute",
            json={
                "situation": {
                    "situation": "new_or_renewal",
                    "permit_category": {
                        "motif": "professionnel",
                        "subcategory": "activite_salariee_standard",
                        "precise_type": "salarie",
                    },
                    "application_kind": "renewal",
                    "current_expiration_date": "2025-01-01",
                },
                "now": "2024-10-01",
            },
        )
        assert resp.status_code == 200
        assert resp.json()["permit_info"]["duration_years"] == [1, 4]


class TestTaxonomyEndpoints:
    def test_motifs(self, client):
        resp = client.get("/api/calculator/taxonomy/motif")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 6
        assert data[0] == {
            "value": "professionnel",
            "label": "Titres de séjour pour motif professionnel",
        }

    def test_subcategories(self, client):
        resp = client.get("/api/calculator/taxonomy/subcategory", params={"parent": "etudes"})
        assert resp.status_code == 200
        assert [o["value"] for o in resp.json()] == [
            "etudiant",
            "etudiant_programme_mobilite",
            "post_etudes",
        ]

    def test_unknown_parent(self, client):
        resp = client.get("/api/calculator/taxonomy/subcategory", params={"parent": "nope"})
        assert resp.status_code == 404
        assert "Unknown parent" in resp.json()["detail"]

    def test_unknown_level(self, client):
        resp = client.get("/api/calculator/taxonomy/department")
        assert resp.status_code == 404

    def test_decision_kinds(self, client):
        resp = client.get("/api/calculator/decision-kinds")
        assert resp.status_code == 200
        kinds = {entry["kind"]: entry for entry in resp.json()}
        assert len(kinds) == 8
        assert kinds["refus_cnda"]["unit"] == "months"
        assert kinds["refus_cnda"]["amount"] == 1
        assert kinds["refus_enregistrement"]["amount"] == 15


    def test_visa_natures(self, client):
        resp = client.get("/api/calculator/visa-natures")
        assert resp.status_code == 200
        natures = resp.json()
        assert len(natures) == 8
        assert natures[0] == {"value": "visa_court_sejour", "label": "Visa de court séjour (Schengen)"}
        assert natures[-1]["value"] == "autre"

    def test_permit_info(self, client):
        resp = client.get("/api/calculator/permit-info/salarie")
        assert resp.status_code == 200
        data = resp.json()
        assert data["duration_years"] == [1, 4]
        assert "Contrat de travail" in data["documents"]

    def test_permit_info_missing_sheet(self, client):
        resp = client.get("/api/calculator/permit-info/refugie")
        assert resp.status_code == 404
        assert "No information sheet" in resp.json()["detail"]

    def test_permit_info_unknown_type(self, client):
        resp = client.get("/api/calculator/permit-info/astronaute")
        assert resp.status_code == 404
        assert "Unknown permit type" in resp.json()["detail"]


class TestPrefillEndpoint:
    def test_prefill(self, client):
        resp = client.post(
            "/api/calculator/prefill",
            json={
                "application": {"situation": "new_or_renewal", "application_kind": "renewal"},
                "profile": {
                    "permit_category": {
                        "motif": "etudes",
                        "subcategory": "etudiant",
                        "precise_type": "etudiant",
                    },
                    "expiration_date": "2025-09-30",
                },
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["permit_category"]["precise_type"] == "etudiant"
        assert data["current_expiration_date"] == "2025-09-30"
        assert data["current_delivery_date"] is None

    def test_prefill_without_profile(self, client):
        resp = client.post(
            "/api/calculator/prefill",
            json={"application": {"current_expiration_date": "2025-01-01"}},
        )
        assert resp.status_code == 200
        assert resp.json()["current_expiration_date"] == "2025-01-01"


class TestMissingServices:
    def test_engine_unavailable(self, app):
        app.state.deadline_engine = None
        client = TestClient(app)
        resp = client.get("/api/calculator/decision-kinds")
        assert resp.status_code == 503


def test_default_clock_is_used(engine):
    app = create_app(settings=Settings(), deadline_engine=engine)
    client = TestClient(app)
    resp = client.post(
        "/api/calculator/compute",
        json={
            "situation": {
                "situation": "decision_litigation",
                "decision_kind": "refus_titre",
                "decision_date": date.today().isoformat(),
            }
        },
    )
    assert resp.status_code == 200
    assert resp.json()["days_remaining"] == 30
