"""Tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider, make_result
from fact_aggregator.api.app import app
from fact_aggregator.infrastructure.config import AggregatorSettings
from fact_aggregator.infrastructure.dependencies import (
    ServiceContainer,
    get_fact_checking_service,
    get_service_container,
)


@pytest.fixture
def google() -> FakeProvider:
    return FakeProvider("google", [[make_result(source="google", trust_score=0.9, publish_date=None)]])


@pytest.fixture
def container(make_factory, google) -> ServiceContainer:
    """Service container over fake providers."""
    return ServiceContainer(settings=AggregatorSettings(), provider_factory=make_factory(google))


@pytest.fixture
def client(container):
    """Test client with the container dependencies overridden."""
    app.dependency_overrides[get_service_container] = lambda: container
    app.dependency_overrides[get_fact_checking_service] = container.get_fact_checking_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client):
    """Test health reports providers and cache."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["providers"] == {"google": True}
    assert data["cache"] is True


def test_verify(client, google):
    """Test single claim verification."""
    response = client.post("/fact-check/verify", json={"claim": "The earth is round", "language": "en"})

    assert response.status_code == 200
    data = response.json()
    assert data["claim"] == "The earth is round"
    assert data["verification"]["status"] == "VERIFIED_TRUE"
    assert data["verification"]["trustScore"] == pytest.approx(0.9)
    assert data["rawResults"][0]["source"] == "google"
    assert data["fromCache"] is False
    assert "processingTime" in data
    assert google.calls == ["The earth is round"]


def test_verify_second_call_cached(client, google):
    """Test repeated requests are served from cache."""
    client.post("/fact-check/verify", json={"claim": "The earth is round"})
    response = client.post("/fact-check/verify", json={"claim": "The earth is round"})

    assert response.json()["fromCache"] is True
    assert len(google.calls) == 1


@pytest.mark.parametrize("body", [{}, {"claim": ""}, {"claim": "   "}, {"claim": 42}])
def test_verify_rejects_missing_claim(client, body):
    """Test malformed claims are rejected."""
    assert client.post("/fact-check/verify", json=body).status_code == 400


def test_verify_unknown_api_returns_error_record(client):
    """Test selecting no provider still answers 200 with an error record."""
    response = client.post("/fact-check/verify", json={"claim": "The earth is round", "apis": ["nothing"]})

    assert response.status_code == 200
    assert response.json()["verification"]["status"] == "ERROR"


def test_verify_batch(client):
    """Test batch verification keeps input order."""
    response = client.post(
        "/fact-check/verify-batch",
        json={"claims": ["The earth is round", "Water is wet"], "maxAgeDays": 60},
    )

    assert response.status_code == 200
    assert [r["claim"] for r in response.json()] == ["The earth is round", "Water is wet"]


def test_verify_batch_empty(client):
    """Test an empty batch."""
    response = client.post("/fact-check/verify-batch", json={"claims": []})
    assert response.status_code == 200
    assert response.json() == []


def test_verify_batch_rejects_blank_entry(client):
    """Test a blank entry rejects the whole batch."""
    response = client.post("/fact-check/verify-batch", json={"claims": ["ok claim", " "]})
    assert response.status_code == 400
