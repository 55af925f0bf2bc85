from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.core.dependencies import get_db
from app.main import app
from app.schemas.subscription_schema import ExpirationSummary

SUMMARY_URL = "/api/dashboard/admin/subscriptions/expiration-summary"


@pytest.fixture
def client(mock_db_session):
    async def _override():
        yield mock_db_session
    app.dependency_overrides[get_db] = _override
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)


def test_root(client):
    response = client.get("/api/")
    assert response.status_code == 200
    assert response.json() == {"message": "Vendor Subscription Lifecycle API is running"}


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_expiration_summary_endpoint(client):
    summary = ExpirationSummary(expiring_in_7_days=3, expiring_in_30_days=10, already_expired=2)
    with patch(
        "app.modules.dashboard.api.expiration_summary_service.get_expiration_summary",
        new_callable=AsyncMock,
        return_value=summary,
    ):
        response = client.get(SUMMARY_URL)

    assert response.status_code == 200
    assert response.json() == {"expiring_in_7_days": 3, "expiring_in_30_days": 10, "already_expired": 2}


def test_expiration_summary_endpoint_returns_zeros_when_datastore_fails(client, mock_db_session):
    mock_db_session.scalar = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

    response = client.get(SUMMARY_URL)

    assert response.status_code == 200
    assert response.json() == {"expiring_in_7_days": 0, "expiring_in_30_days": 0, "already_expired": 0}


def test_unknown_route_uses_error_format(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "code": 404}
