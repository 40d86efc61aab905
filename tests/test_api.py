"""
Tests for the InspectPilot HTTP API

The client is used as a context manager so the lifespan loads the
shipped packs.
"""
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import photos
from inspectpilot.config import Settings
from inspectpilot.engine.photo_signing import sign_photo_url


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Health
# =============================================================================

class TestHealth:
    """Tests for /health."""

    def test_health(self, client):
        response = client.get("/health")
        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["rules_loaded"] == 16
        assert data["profiles_loaded"] == 16
        assert data["rules_version"] == "2025.1"
        assert len(response.headers["X-Request-ID"]) == 8


# =============================================================================
# Findings
# =============================================================================

class TestFindings:
    """Tests for /findings."""

    def test_derive(self, client, raw_answers):
        response = client.post("/findings/derive", json={"raw": raw_answers, "existing": ["LEGACY_SUPPLY_FUSE"]})
        data = response.json()
        assert response.status_code == 200
        assert [f["id"] for f in data["findings"]] == ["PARTIAL_RCD_COVERAGE"]
        assert data["findings"][0]["priority"] == "RECOMMENDED_0_3_MONTHS"
        assert data["rule_count"] == 16

    def test_derive_requires_raw(self, client):
        assert client.post("/findings/derive", json={}).status_code == 422

    def test_profile(self, client):
        response = client.get("/findings/PARTIAL_RCD_COVERAGE/profile")
        data = response.json()
        assert response.status_code == 200
        assert data["category"] == "SAFETY"
        assert data["budget_range"] == "AUD $350–$450"
        assert data["classification"]["system_group"] == "rcd"

    def test_unknown_profile(self, client):
        response = client.get("/findings/NOT_PROFILED/profile")
        data = response.json()
        assert response.status_code == 404
        assert data["code"] == "IP_PROFILE_NOT_FOUND"
        assert data["finding_id"] == "NOT_PROFILED"
        assert data["request_id"] == response.headers["X-Request-ID"]


# =============================================================================
# Signals
# =============================================================================

class TestSignals:
    """Tests for /signals."""

    def test_explicit_dimensions(self, client):
        dimensions = {
            "safety_impact": "high",
            "compliance_exposure": "low",
            "failure_likelihood": "low",
            "urgency": "now",
            "degradation_trend": "stable",
            "tenant_disruption_risk": "low",
            "cost_volatility": "known",
            "detectability": "visible",
            "decision_complexity": "simple",
        }
        response = client.post("/signals", json={"findings": [{"id": "X", "dimensions": dimensions}]})
        data = response.json()
        assert response.status_code == 200
        assert data["finding_signals"]["X"]["has_immediate_safety_risk"] is True
        assert data["property_signals"]["overall_health"] == "HIGH_RISK"
        assert data["risk_label"] == "Elevated"

    def test_normalized_from_profile(self, client):
        response = client.post("/signals", json={"findings": [{"id": "NO_RCD_PROTECTION"}]})
        data = response.json()
        assert response.status_code == 200
        assert data["dimensions"]["NO_RCD_PROTECTION"]["safety_impact"] == "high"
        assert data["dimensions"]["NO_RCD_PROTECTION"]["urgency"] == "now"

    def test_partial_dimensions_defaulted(self, client):
        response = client.post("/signals", json={"findings": [
            {"id": "X", "dimensions": {"safety_impact": "high", "urgency": "now"}},
        ]})
        data = response.json()
        assert response.status_code == 200
        assert data["dimensions"]["X"]["safety_impact"] == "high"
        assert data["dimensions"]["X"]["compliance_exposure"] == "low"
        assert data["finding_signals"]["X"]["has_immediate_safety_risk"] is True

    def test_partial_dimensions_fill_from_profile(self, client):
        response = client.post("/signals", json={"findings": [
            {"id": "NO_RCD_PROTECTION", "dimensions": {"urgency": "6_18m"}},
        ]})
        dims = response.json()["dimensions"]["NO_RCD_PROTECTION"]
        assert response.status_code == 200
        assert dims["urgency"] == "6_18m"
        assert dims["safety_impact"] == "high"

    def test_invalid_dimension_value(self, client):
        response = client.post("/signals", json={"findings": [
            {"id": "X", "dimensions": {"safety_impact": "extreme"}},
        ]})
        assert response.status_code == 422

    def test_empty_list(self, client):
        data = client.post("/signals", json={"findings": []}).json()
        assert data["property_signals"]["overall_health"] == "GOOD"
        assert data["risk_label"] == "Low"


# =============================================================================
# Reports
# =============================================================================

class TestReports:
    """Tests for /reports."""

    def test_finding_pages(self, client):
        response = client.post("/reports/finding-pages", json={
            "findings": [{"id": "PARTIAL_RCD_COVERAGE", "priority": "RECOMMENDED", "photo_ids": ["P01"]}],
            "inspection_id": "INS-1",
            "photo_captions": {"P01": "Switchboard"},
        })
        data = response.json()
        assert response.status_code == 200
        page = data["pages"][0]
        assert page["budgetary_planning_range"] == "AUD $350–$450"
        assert page["evidence"]["items"][0]["caption"] == "Switchboard"
        assert data["fields"]["FINDING_COUNT"] == "1"

    def test_finding_pages_batch_failure(self, client):
        response = client.post("/reports/finding-pages", json={
            "findings": [{"id": "UNKNOWN_A"}, {"id": "PARTIAL_RCD_COVERAGE"}, {"id": "UNKNOWN_B"}],
        })
        data = response.json()
        assert response.status_code == 422
        assert data["code"] == "IP_FINDING_PAGES_INVALID"
        assert data["finding_ids"] == ["UNKNOWN_A", "UNKNOWN_B"]
        assert len(data["violations"]) == 2

    def test_inspection(self, client, raw_answers):
        response = client.post("/reports/inspection", json={"raw": raw_answers, "inspection_id": "INS-1"})
        data = response.json()
        assert response.status_code == 200
        assert data["derived_ids"] == ["LEGACY_SUPPLY_FUSE", "PARTIAL_RCD_COVERAGE"]
        assert [p["finding_id"] for p in data["pages"]] == ["LEGACY_SUPPLY_FUSE", "PARTIAL_RCD_COVERAGE"]
        assert data["limitations"] == ["roof_space.accessible: skipped (no_access) - Hatch sealed"]


# =============================================================================
# Photos
# =============================================================================

class TestPhotos:
    """Tests for /api/inspectionPhoto."""

    @pytest.fixture
    def signed_client(self, client):
        photos.set_settings(Settings(photo_signing_secret="api-secret"))
        yield client
        photos.set_settings(Settings())

    def test_valid_link(self, signed_client):
        url = sign_photo_url("INS-1", "P01", "http://testserver", "api-secret")
        target = urlparse(url)
        response = signed_client.get(f"{target.path}?{target.query}")
        data = response.json()
        assert response.status_code == 200
        assert data["verified"] is True
        assert data["expires"] == int(parse_qs(target.query)["expires"][0])

    def test_tampered_link(self, signed_client):
        url = sign_photo_url("INS-1", "P01", "http://testserver", "api-secret")
        target = urlparse(url)
        response = signed_client.get(f"{target.path}?{target.query.replace('P01', 'P02')}")
        assert response.status_code == 403
        assert response.json()["details"]["reason"] == "token mismatch"

    def test_signing_disabled(self, client):
        photos.set_settings(Settings())
        response = client.get("/api/inspectionPhoto", params={"inspection_id": "INS-1", "photo_id": "P01"})
        assert response.status_code == 403
        assert response.json()["code"] == "IP_PHOTO_TOKEN_INVALID"
