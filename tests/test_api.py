"""Tests for the portfolio HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from portfolio_scanner.api.portfolio import get_client
from portfolio_scanner.main import app
from tests.fakes.fake_reasoning import ScriptedReasoningClient, dimension_response

FIFTEEN_WORDS = "I learned to fix bikes at the shop with my uncle every single Saturday morning."


@pytest.fixture
def api():
    app.dependency_overrides[get_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Portfolio routes
# ============================================================================


class TestPortfolioRoutes:
    def test_evaluate_returns_synthesis(self, api, strong_portfolio):
        response = api.post("/v1/portfolio/evaluate", json={"portfolio": strong_portfolio})
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "general"
        assert 0.0 <= data["overall_score"] <= 10.0
        assert "heuristic_scoring" in data["flags"]

    def test_analyze_includes_performance(self, api, strong_portfolio):
        response = api.post(
            "/v1/portfolio/analyze",
            json={"portfolio": strong_portfolio, "mode": "ucla", "include_guidance": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "ucla"
        assert data["portfolio_id"] == "pf-strong"
        assert len(data["dimensions"]) == 6
        assert data["guidance"] is not None
        assert data["performance"]["llm_calls"] == 0
        assert data["performance"]["estimated_cost_usd"] == 0.0

    def test_missing_academic_record_is_422(self, api):
        response = api.post("/v1/portfolio/evaluate", json={"portfolio": {"activities": []}})
        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "academic"

    def test_unknown_mode_is_400(self, api, minimal_portfolio):
        response = api.post(
            "/v1/portfolio/evaluate", json={"portfolio": minimal_portfolio, "mode": "oxford"}
        )
        assert response.status_code == 400
        assert "oxford" in response.json()["detail"]

    def test_missing_body_field_is_422(self, api):
        response = api.post("/v1/portfolio/evaluate", json={})
        assert response.status_code == 422


class TestDimensionRoute:
    def test_alias_routes_to_dimension(self, api, strong_portfolio):
        response = api.post(
            "/v1/portfolio/dimensions/leadership", json={"portfolio": strong_portfolio}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["dimension"] == "leadership_initiative"
        assert data["path"] == "heuristic"

    def test_unknown_dimension_is_422(self, api, strong_portfolio):
        response = api.post("/v1/portfolio/dimensions/charm", json={"portfolio": strong_portfolio})
        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "dimension"

    def test_uses_injected_client(self, strong_portfolio):
        client = ScriptedReasoningClient([dimension_response(7.5, "strong")])
        app.dependency_overrides[get_client] = lambda: client
        try:
            response = TestClient(app).post(
                "/v1/portfolio/dimensions/community-impact", json={"portfolio": strong_portfolio}
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        data = response.json()
        assert data["dimension"] == "community_impact"
        assert data["score"] == 7.5
        assert data["path"] == "primary"
        assert len(client.calls) == 1


# ============================================================================
# Entry scoring
# ============================================================================


class TestEntryRoute:
    def test_short_entry_is_capped(self, api):
        response = api.post(
            "/v1/entries/score",
            json={"text": FIFTEEN_WORDS, "options": {"activity_id": "act-1"}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["entry_id"] == "act-1"
        assert data["word_count"] == 15
        assert data["score"] == 1.0
        assert data["path"] == "heuristic"

    def test_empty_body_scores_empty_entry(self, api):
        response = api.post("/v1/entries/score", json={})
        assert response.status_code == 200
        data = response.json()
        assert data["word_count"] == 0
        assert "empty_submission" in data["flags"]
