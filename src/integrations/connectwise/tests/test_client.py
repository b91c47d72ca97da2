"""Tests for the ConnectWise Manage client using httpx.MockTransport."""

import base64
import json
from datetime import UTC, datetime

import httpx
import pytest

from src.db.credentials.schemas import ConnectWiseCredentials
from src.integrations.connectwise.client import ConnectWiseClient, search_conditions
from src.integrations.connectwise.exceptions import (
    ConnectWiseAuthenticationError,
    ConnectWiseBadRequestError,
    ConnectWiseError,
    ConnectWiseServerError,
    ConnectWiseTimeoutError,
)

CREDENTIALS = ConnectWiseCredentials(
    base_url="https://na.myconnectwise.net/",
    company_id="acme",
    public_key="pub",
    private_key="priv",
    client_id="client-123",
)

TICKET = {
    "id": 1001,
    "summary": "Assign numbers to new starters",
    "recordType": "ServiceTicket",
    "board": {"id": 1, "name": "Help Desk"},
    "status": {"id": 5, "name": "In Progress"},
    "company": {"id": 9, "identifier": "Contoso", "name": "Contoso Ltd"},
    "_info": {"lastUpdated": "2026-01-01T00:00:00Z"},
}


class Recorder:
    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def make_client(handler) -> tuple[ConnectWiseClient, Recorder]:
    recorder = Recorder(handler)
    return ConnectWiseClient(CREDENTIALS, transport=httpx.MockTransport(recorder)), recorder


class TestSearchConditions:
    def test_numeric_query_is_ticket_id(self):
        assert search_conditions(" 1001 ") == "id = 1001"

    def test_text_query_is_escaped(self):
        assert search_conditions('say "hi"') == 'summary contains "say \\"hi\\""'


class TestConnectWiseClient:
    @pytest.mark.asyncio
    async def test_auth_headers_and_base_url(self):
        client, recorder = make_client(lambda request: httpx.Response(200, json=[]))

        async with client:
            await client.search_tickets("printer")

        request = recorder.requests[0]
        assert request.url.path == "/v4_6_release/apis/3.0/service/tickets"
        expected = base64.b64encode(b"acme+pub:priv").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["clientId"] == "client-123"
        assert request.url.params["conditions"] == 'summary contains "printer"'
        assert request.url.params["orderBy"] == "id desc"
        assert request.url.params["pageSize"] == "25"

    @pytest.mark.asyncio
    async def test_search_flattens_tickets(self):
        client, _ = make_client(lambda request: httpx.Response(200, json=[TICKET]))

        async with client:
            results = await client.search_tickets("1001", limit=5)

        assert results[0].id == 1001
        assert results[0].status == "In Progress"
        assert results[0].company == "Contoso Ltd"
        assert results[0].board == "Help Desk"

    @pytest.mark.asyncio
    async def test_get_ticket_not_found_returns_none(self):
        client, _ = make_client(lambda request: httpx.Response(404, json={}))

        async with client:
            assert await client.get_ticket(1) is None

    @pytest.mark.asyncio
    async def test_add_note(self):
        client, recorder = make_client(
            lambda request: httpx.Response(201, json={"id": 77})
        )

        async with client:
            created = await client.add_note(1001, "Done", internal=True, member_identifier="jdoe")

        body = json.loads(recorder.requests[0].content)
        assert created == {"id": 77}
        assert recorder.requests[0].url.path.endswith("/service/tickets/1001/notes")
        assert body == {
            "text": "Done",
            "internalAnalysisFlag": True,
            "detailDescriptionFlag": False,
            "member": {"identifier": "jdoe"},
        }

    @pytest.mark.asyncio
    async def test_add_time_entry(self):
        client, recorder = make_client(lambda request: httpx.Response(201, json={"id": 5}))

        async with client:
            await client.add_time_entry(
                1001,
                "jdoe",
                0.25,
                notes="Voice setup",
                work_type_id=3,
                time_start=datetime(2026, 1, 2, 9, 30, 15, 123, tzinfo=UTC),
            )

        body = json.loads(recorder.requests[0].content)
        assert recorder.requests[0].url.path.endswith("/time/entries")
        assert body["chargeToId"] == 1001
        assert body["chargeToType"] == "ServiceTicket"
        assert body["timeStart"] == "2026-01-02T09:30:15Z"
        assert body["actualHours"] == 0.25
        assert body["workType"] == {"id": 3}
        assert body["notes"] == "Voice setup"

    @pytest.mark.asyncio
    async def test_update_status_uses_json_patch(self):
        client, recorder = make_client(lambda request: httpx.Response(200, json=TICKET))

        async with client:
            await client.update_status(1001, 7)

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == [
            {"op": "replace", "path": "status/id", "value": 7}
        ]

    @pytest.mark.asyncio
    async def test_board_statuses_for_all_boards(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/service/boards"):
                return httpx.Response(200, json=[{"id": 1}, {"id": 2}])
            board_id = int(request.url.path.split("/")[-2])
            return httpx.Response(
                200,
                json=[{"id": board_id * 10, "name": "Closed", "board": {"id": board_id}}],
            )

        client, _ = make_client(handler)

        async with client:
            statuses = await client.list_board_statuses()

        assert [(s.id, s.board_id) for s in statuses] == [(10, 1), (20, 2)]

    @pytest.mark.parametrize(
        "status_code,error_class",
        [
            (401, ConnectWiseAuthenticationError),
            (403, ConnectWiseAuthenticationError),
            (400, ConnectWiseBadRequestError),
            (500, ConnectWiseServerError),
            (409, ConnectWiseError),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_mapping(self, status_code, error_class):
        client, _ = make_client(lambda request: httpx.Response(status_code, text="nope"))

        async with client:
            with pytest.raises(error_class):
                await client.search_tickets("x")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client, _ = make_client(handler)

        async with client:
            with pytest.raises(ConnectWiseTimeoutError):
                await client.get_ticket(1)

    @pytest.mark.asyncio
    async def test_connection_test(self):
        ok_client, recorder = make_client(lambda request: httpx.Response(200, json=[]))
        bad_client, _ = make_client(lambda request: httpx.Response(401))

        async with ok_client, bad_client:
            ok = await ok_client.test_connection()
            bad = await bad_client.test_connection()

        assert ok.success is True
        assert recorder.requests[0].url.path.endswith("/company/companies")
        assert bad.success is False
        assert "401" in bad.message
