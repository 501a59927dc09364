"""
Tests for the FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient

from utils.config import Config
from web.app import create_app


SUBJECT = {
    "id": "subject-1",
    "coordinates": {"lat": 40.4168, "lng": -3.7038},
    "area": 100,
    "building_year": 2000,
    "rooms": 3,
    "bathrooms": 2,
    "condition": "good",
    "property_type": "apartment",
}


def _comp(comp_id: str, **overrides) -> dict:
    comp = {
        "id": comp_id,
        "coordinates": {"lat": 40.4168, "lng": -3.7038},
        "area": 100,
        "building_year": 2000,
        "rooms": 3,
        "bathrooms": 2,
        "sale_price": 300000,
        "sale_date": "2024-06-01",
        "days_on_market": 30,
        "condition": "good",
        "property_type": "apartment",
        "verified": True,
    }
    comp.update(overrides)
    return comp


@pytest.fixture
def client():
    return TestClient(create_app(Config()))


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestOperations:

    def test_similarity(self, client):
        response = client.post("/api/similarity", json={"subject": SUBJECT, "comparable": _comp("c1")})
        assert response.status_code == 200
        assert response.json() == {"similarity": 1.0, "distance_m": 0.0}

    def test_adjustments(self, client):
        body = {"subject": SUBJECT, "comparable": _comp("c1", sale_price=200000, area=80)}
        data = client.post("/api/adjustments", json=body).json()
        assert data["adjusted_price"] == 240000
        assert data["breakdown"]["area"] == pytest.approx(20.0)

    def test_statistics(self, client):
        comps = [_comp(f"c{p}", sale_price=p) for p in (100000, 200000, 300000, 400000)]
        data = client.post("/api/statistics", json={"comparables": comps}).json()
        assert data["median_price"] == 300000

    def test_confidence_empty(self, client):
        data = client.post("/api/confidence", json={"subject": SUBJECT, "comparables": []}).json()
        assert data["confidence"] == 0.1

    def test_ensemble(self, client):
        body = {
            "results": [
                {"model_id": "A", "estimated_value": 300000, "confidence": 0.9},
                {"model_id": "B", "estimated_value": 340000, "confidence": 0.6},
            ],
            "weights": {"A": 1, "B": 2},
        }
        data = client.post("/api/ensemble", json=body).json()
        assert data["value"] == 226000
        assert data["confidence"] == pytest.approx(0.7)

    def test_ensemble_negative_weight(self, client):
        body = {
            "results": [{"model_id": "A", "estimated_value": 300000, "confidence": 0.9}],
            "weights": {"A": -1},
        }
        response = client.post("/api/ensemble", json=body)
        assert response.status_code == 422
        assert response.json()["error"] == "ComputationError"


class TestValuation:

    def test_valuation(self, client):
        body = {
            "subject": SUBJECT,
            "comparables": [_comp(f"c{i}") for i in range(3)],
            "reference_date": "2024-06-01",
        }
        response = client.post("/api/valuation", json=body)
        assert response.status_code == 200
        data = response.json()
        assert data["comparables_used"] == 3
        assert len(data["results"]) == 3
        assert data["weighted"]["value"] == 285000

    def test_valuation_with_filters(self, client):
        body = {
            "subject": SUBJECT,
            "comparables": [_comp("c1"), _comp("c2", verified=False)],
            "filters": {"verified_only": True},
            "reference_date": "2024-06-01",
        }
        data = client.post("/api/valuation", json=body).json()
        assert data["comparables_used"] == 1

    def test_invalid_subject(self, client):
        body = {"subject": dict(SUBJECT, area=-5), "comparables": []}
        response = client.post("/api/valuation", json=body)
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidSubject"

    def test_invalid_coordinates(self, client):
        subject = dict(SUBJECT, coordinates={"lat": 95, "lng": 0})
        response = client.post("/api/similarity", json={"subject": subject, "comparable": _comp("c1")})
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidCoordinates"

    def test_unknown_model(self, client):
        body = {"subject": SUBJECT, "comparables": [], "model_ids": ["nope"]}
        response = client.post("/api/valuation", json=body)
        assert response.status_code == 422
        assert response.json()["error"] == "ValueError"

    def test_malformed_body(self, client):
        response = client.post("/api/valuation", json={"subject": {"id": "x"}})
        assert response.status_code == 422
