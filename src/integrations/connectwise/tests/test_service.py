"""Tests for documenting bulk assignments on ConnectWise tickets."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from src.db.credentials.schemas import ConnectWiseCredentials
from src.integrations.connectwise.schemas import TicketLink
from src.integrations.connectwise.service import ConnectWiseService, bulk_assignment_note
from src.workflows.schemas import AssignmentResult

RESULTS = [
    AssignmentResult(user_id="alice", user_name="Alice", success=True),
    AssignmentResult(user_id="bob", success=False, error="Policy not found"),
]


def credentials(**overrides) -> ConnectWiseCredentials:
    values = {
        "base_url": "https://na.myconnectwise.net",
        "company_id": "acme",
        "public_key": "pub",
        "private_key": "priv",
        "client_id": "client-123",
        "default_time_minutes": 30,
    }
    values.update(overrides)
    return ConnectWiseCredentials(**values)


def make_service(creds: ConnectWiseCredentials, handler):
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    creds_service = AsyncMock()
    creds_service.get_connectwise_credentials.return_value = creds
    return ConnectWiseService(creds_service, transport=httpx.MockTransport(record)), requests


class TestBulkAssignmentNote:
    def test_lists_every_user(self):
        note = bulk_assignment_note(RESULTS, "Ops")

        assert note.splitlines() == [
            "Teams voice bulk assignment by Ops: 1 succeeded, 1 failed.",
            "- Alice: assigned",
            "- bob: FAILED (Policy not found)",
        ]


class TestDocumentBulkAssignment:
    @pytest.mark.asyncio
    async def test_note_only_without_member(self):
        service, requests = make_service(
            credentials(), lambda request: httpx.Response(201, json={})
        )

        outcome = await service.document_bulk_assignment(
            "t1", TicketLink(ticket_id=42), RESULTS, "Ops"
        )

        assert outcome.note_added is True
        assert outcome.time_entry_added is False
        assert outcome.status_updated is False
        assert outcome.error is None
        assert len(requests) == 1
        assert json.loads(requests[0].content)["internalAnalysisFlag"] is True

    @pytest.mark.asyncio
    async def test_time_entry_and_status(self):
        service, requests = make_service(
            credentials(auto_update_status=True, default_status_id=9),
            lambda request: httpx.Response(200, json={}),
        )

        outcome = await service.document_bulk_assignment(
            "t1", TicketLink(ticket_id=42, member_identifier="jdoe"), RESULTS, "Ops"
        )

        assert outcome.time_entry_added is True
        assert outcome.status_updated is True
        assert [r.method for r in requests] == ["POST", "POST", "PATCH"]
        assert json.loads(requests[1].content)["actualHours"] == 0.5

    @pytest.mark.asyncio
    async def test_failure_is_reported_inline(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/time/entries"):
                return httpx.Response(400, text="member not found")
            return httpx.Response(201, json={})

        service, _ = make_service(credentials(), handler)

        outcome = await service.document_bulk_assignment(
            "t1", TicketLink(ticket_id=42, member_identifier="ghost"), RESULTS, "Ops"
        )

        assert outcome.note_added is True
        assert outcome.time_entry_added is False
        assert "member not found" in outcome.error
