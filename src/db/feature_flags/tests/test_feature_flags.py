"""Tests for feature flag resolution and administration."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.constants import Role
from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_feature_flag_repository
from src.db.feature_flags.dependencies import get_feature_flags, require_feature
from src.db.feature_flags.model import FeatureFlag
from src.db.feature_flags.schemas import FeatureFlags, FeatureKey
from src.main import app

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)


def flag(key: str, enabled: bool) -> FeatureFlag:
    return FeatureFlag(feature_key=key, is_enabled=enabled, updated_at=NOW)


@pytest.mark.asyncio
async def test_only_known_enabled_flags_are_resolved():
    session = AsyncMock(spec=AsyncSession)
    result = MagicMock()
    result.scalars.return_value.all.return_value = [
        flag("bulk_assignment", True),
        flag("number_management", False),
        flag("retired_feature", True),
    ]
    session.execute.return_value = result

    flags = await get_feature_flags(session)

    assert flags.enabled == frozenset({FeatureKey.BULK_ASSIGNMENT})


@pytest.mark.asyncio
async def test_require_feature():
    dependency = require_feature(FeatureKey.CONNECTWISE_INTEGRATION)
    enabled = FeatureFlags(enabled=frozenset({FeatureKey.CONNECTWISE_INTEGRATION}))

    assert await dependency(enabled) is enabled
    with pytest.raises(HTTPException) as exc_info:
        await dependency(FeatureFlags())
    assert exc_info.value.status_code == 403


class TestFeatureFlagRoutes:
    @pytest.fixture
    def user(self):
        return User(
            id="admin-1", email="admin@example.com", name="Admin", role=Role.ADMIN
        )

    @pytest.fixture
    def repository(self):
        return AsyncMock()

    @pytest.fixture
    def client(self, user, repository):
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_feature_flag_repository] = lambda: repository

        with TestClient(app) as test_client:
            yield test_client

        app.dependency_overrides.clear()

    def test_list(self, client, repository):
        repository.list_all.return_value = [flag("bulk_assignment", True)]

        response = client.get("/api/feature-flags")

        assert response.status_code == 200
        assert response.json()[0]["is_enabled"] is True

    def test_toggle_records_admin(self, client, repository):
        repository.set_enabled.return_value = flag("bulk_assignment", True)

        response = client.put(
            "/api/feature-flags/bulk_assignment", json={"is_enabled": True}
        )

        assert response.status_code == 200
        repository.set_enabled.assert_awaited_once_with(
            "bulk_assignment", True, "admin@example.com"
        )

    def test_unknown_key(self, client, repository):
        response = client.put("/api/feature-flags/nope", json={"is_enabled": True})

        assert response.status_code == 404
        repository.set_enabled.assert_not_awaited()

    def test_operator_forbidden(self, client, user):
        user.role = Role.OPERATOR

        response = client.get("/api/feature-flags")

        assert response.status_code == 403
