"""Tests for the phone number inventory endpoints."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from src.auth.constants import Role
from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_tenant
from src.db.feature_flags.dependencies import get_feature_flags
from src.db.feature_flags.schemas import FeatureFlags, FeatureKey
from src.db.phone_numbers.dependencies import get_phone_number_service
from src.db.phone_numbers.schemas import BulkImportResponse, NextAvailableResponse
from src.db.phone_numbers.tests.fakes import TENANT_ID, number
from src.db.tenants.model import CustomerTenant
from src.main import app

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)
BASE = f"/api/tenants/{TENANT_ID}/numbers"


def mock_get_current_user_func():
    return User(id="operator-1", email="ops@example.com", name="Ops", role=Role.OPERATOR)


def mock_get_tenant_func():
    return CustomerTenant(
        id=TENANT_ID,
        azure_tenant_id="00000000-0000-0000-0000-000000000001",
        tenant_name="Contoso",
        is_active=True,
    )


def stored(line_uri: str = "tel:+15551230001", **fields):
    return number(line_uri, created_at=NOW, updated_at=NOW, **fields)


@pytest.fixture
def flags():
    return SimpleNamespace(
        value=FeatureFlags(enabled=frozenset({FeatureKey.NUMBER_MANAGEMENT}))
    )


@pytest.fixture
def service():
    return AsyncMock()


@pytest.fixture
def client(flags, service):
    app.dependency_overrides[get_current_user] = mock_get_current_user_func
    app.dependency_overrides[get_tenant] = mock_get_tenant_func
    app.dependency_overrides[get_feature_flags] = lambda: flags.value
    app.dependency_overrides[get_phone_number_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_list_numbers_passes_filters(client, service):
    service.list_numbers.return_value = [stored(display_name="Alice")]

    response = client.get(BASE, params={"status": "used", "search": "ali"})

    assert response.status_code == 200
    assert response.json()[0]["display_name"] == "Alice"
    service.list_numbers.assert_awaited_once_with(
        TENANT_ID, status_filter="used", number_type=None, search="ali"
    )


def test_create_number(client, service):
    service.create_number.return_value = stored()

    response = client.post(BASE, json={"line_uri": "tel:+15551230001"})

    assert response.status_code == 201
    assert response.json()["line_uri"] == "tel:+15551230001"
    args = service.create_number.await_args.args
    assert args[0] == TENANT_ID
    assert args[2] == "ops@example.com"


def test_create_rejects_invalid_line_uri(client, service):
    response = client.post(BASE, json={"line_uri": "+15551230001"})

    assert response.status_code == 422
    service.create_number.assert_not_awaited()


def test_import_numbers(client, service):
    service.bulk_import.return_value = BulkImportResponse(
        created=1, failed=[{"line_uri": "bad", "error": "Must start with 'tel:'"}]
    )

    response = client.post(
        f"{BASE}/import",
        json={"numbers": [{"line_uri": "tel:+15551230001"}, {"line_uri": "bad"}]},
    )

    assert response.status_code == 200
    assert response.json()["created"] == 1
    assert len(service.bulk_import.await_args.args[1]) == 2


def test_next_available(client, service):
    service.next_available.return_value = NextAvailableResponse(
        number_range="tel:+1555123xxxx",
        available=True,
        next_available="tel:+15551230000",
        next_variable_digits="0000",
        total_capacity=10000,
        used_count=0,
        remaining_capacity=10000,
        utilization_percent=0,
    )

    response = client.post(
        f"{BASE}/next-available", json={"number_range": "tel:+1555123xxxx"}
    )

    assert response.status_code == 200
    assert response.json()["next_available"] == "tel:+15551230000"


def test_reserve_defaults_to_operator(client, service):
    service.reserve.return_value = stored(status="reserved")

    response = client.post(f"{BASE}/number-1/reserve", json={})

    assert response.status_code == 200
    assert response.json()["status"] == "reserved"
    service.reserve.assert_awaited_once_with(
        TENANT_ID, "number-1", "ops@example.com", "ops@example.com"
    )


def test_release_conflict_is_propagated(client, service):
    service.release.side_effect = HTTPException(status_code=409, detail="not reserved")

    response = client.post(f"{BASE}/number-1/release")

    assert response.status_code == 409


def test_delete_number(client, service):
    response = client.delete(f"{BASE}/number-1")

    assert response.status_code == 204
    service.delete_number.assert_awaited_once_with(TENANT_ID, "number-1")


def test_feature_flag_off(client, flags, service):
    flags.value = FeatureFlags()

    response = client.get(BASE)

    assert response.status_code == 403
    service.list_numbers.assert_not_awaited()
