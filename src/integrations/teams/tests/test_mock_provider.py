"""Tests for the mock Teams directory provider."""

import pytest

from src.integrations.teams.constants import PolicyType
from src.integrations.teams.providers.mock import MockTeamsDirectory
from src.integrations.teams.providers.mock_data import MOCK_DIRECTORY
from src.workflows.schemas import AssignmentRequest


@pytest.fixture
def mock_directory():
    return MockTeamsDirectory(failing_user_ids={"blocked@contoso.example"})


class TestMockTeamsDirectory:
    @pytest.mark.asyncio
    async def test_returns_seed_directory(self, mock_directory):
        records = await mock_directory.fetch_remote_directory("t1")

        assert len(records) == len(MOCK_DIRECTORY)
        assert all(r.line_uri.startswith("tel:+") for r in records)

    @pytest.mark.asyncio
    async def test_assignment_updates_only_that_tenant(self, mock_directory):
        results = await mock_directory.submit_bulk_assignment(
            "t1",
            [
                AssignmentRequest(
                    user_id="new.user@contoso.example",
                    user_name="New User",
                    phone_number="tel:+15555550199",
                    routing_policy="US-National",
                )
            ],
        )

        assert results[0].success is True
        t1 = await mock_directory.fetch_remote_directory("t1")
        t2 = await mock_directory.fetch_remote_directory("t2")
        assert "tel:+15555550199" in {r.line_uri for r in t1}
        assert "tel:+15555550199" not in {r.line_uri for r in t2}

    @pytest.mark.asyncio
    async def test_reassignment_replaces_previous_number(self, mock_directory):
        await mock_directory.submit_bulk_assignment(
            "t1",
            [
                AssignmentRequest(
                    user_id="emily.davis@contoso.example",
                    phone_number="tel:+15555550199",
                    routing_policy="US-International",
                )
            ],
        )

        records = await mock_directory.fetch_remote_directory("t1")
        emily = [
            r for r in records if r.user_principal_name == "emily.davis@contoso.example"
        ]
        assert [r.line_uri for r in emily] == ["tel:+15555550199"]

    @pytest.mark.asyncio
    async def test_failing_users(self, mock_directory):
        results = await mock_directory.submit_bulk_assignment(
            "t1",
            [
                AssignmentRequest(
                    user_id="blocked@contoso.example",
                    phone_number="tel:+15555550198",
                    routing_policy="US-National",
                )
            ],
        )

        assert results[0].success is False
        assert results[0].error

    @pytest.mark.asyncio
    async def test_policies(self, mock_directory):
        routing = await mock_directory.fetch_routing_policies("t1")
        meeting = await mock_directory.fetch_policies("t1", PolicyType.MEETING)

        assert "Tag:US-National" in {p.id for p in routing}
        assert [p.identity for p in meeting] == ["Global"]

    @pytest.mark.asyncio
    async def test_connection(self, mock_directory):
        result = await mock_directory.test_connection("t1")

        assert result.success is True
