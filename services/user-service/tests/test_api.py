from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.domain.errors import StoreError, ValidationError
from app.domain.service import RegistrationService
from app.main import app as service_app


class UnavailableStore:
    """Store whose backend is down for every operation."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise StoreError("account store unavailable")

        return fail


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.registration_service = service

    with TestClient(app) as client:
        yield client, service


def _payload(**overrides) -> dict[str, str]:
    payload = {
        "email": "john@example.com",
        "username": "johndoe",
        "first_name": "John",
        "last_name": "Doe",
        "password": "secret123",
    }
    payload.update(overrides)
    return payload


def test_register_returns_created_account(api_client):
    client, _ = api_client

    response = client.post("/api/auth/register", json=_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["email"] == "john@example.com"
    assert body["username"] == "johndoe"
    assert body["full_name"] == "John Doe"
    assert body["created_at"].startswith("2024-01-01T12:00:00")
    assert response.headers["Location"] == f"/api/users/{body['id']}"


def test_registered_user_can_be_fetched(api_client):
    client, _ = api_client
    created = client.post("/api/auth/register", json=_payload()).json()

    response = client.get(f"/api/users/{created['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == "John"
    assert body["is_active"] is True
    assert body["is_deleted"] is False
    assert "password_hash" not in body


def test_unknown_user_is_404(api_client):
    client, _ = api_client
    response = client.get("/api/users/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "account not found"


def test_invalid_input_is_400(api_client):
    client, _ = api_client
    response = client.post("/api/auth/register", json=_payload(username="ab"))
    assert response.status_code == 400
    assert response.json()["detail"] == "invalid username format"


def test_duplicate_email_is_409(api_client):
    client, _ = api_client
    assert client.post("/api/auth/register", json=_payload()).status_code == 201

    response = client.post("/api/auth/register", json=_payload(username="janedoe"))

    assert response.status_code == 409
    assert response.json()["detail"] == "email already registered"


def test_missing_field_is_rejected_by_schema(api_client):
    client, _ = api_client
    payload = _payload()
    del payload["password"]
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 422


def test_store_outage_is_503(hasher):
    app = FastAPI()
    app.include_router(routes.router)
    app.state.registration_service = RegistrationService(UnavailableStore(), hasher)

    with TestClient(app) as client:
        response = client.post("/api/auth/register", json=_payload())

    assert response.status_code == 503
    assert response.json()["detail"] == "account store unavailable"
    assert hasher.calls == []


def test_health_and_metrics_endpoints():
    with TestClient(service_app) as client:
        assert client.get("/health").json() == {"status": "ok"}
        client.post("/api/auth/register", json=_payload(password=""))
        metrics = client.get("/metrics")

    assert metrics.status_code == 200
    assert 'user_registrations_total{outcome="invalid"}' in metrics.text


class CorruptRowStore:
    """Store holding a row that no longer satisfies the value-object rules."""

    def get_by_id(self, account_id):
        raise ValidationError("invalid username format")


def test_invalid_stored_row_is_500(hasher):
    app = FastAPI()
    app.include_router(routes.router)
    app.state.registration_service = RegistrationService(CorruptRowStore(), hasher)

    with TestClient(app) as client:
        response = client.get("/api/users/legacy-row")

    assert response.status_code == 500
    assert response.json()["detail"] == "stored account is invalid"
