"""Async ConnectWise Manage REST API client."""

from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from src.db.credentials.schemas import ConnectionTestResult, ConnectWiseCredentials
from src.integrations.connectwise.config import (
    ConnectWiseSettings,
    get_connectwise_settings,
)
from src.integrations.connectwise.exceptions import (
    ConnectWiseAuthenticationError,
    ConnectWiseBadRequestError,
    ConnectWiseError,
    ConnectWiseNotFoundError,
    ConnectWiseServerError,
    ConnectWiseTimeoutError,
)
from src.integrations.connectwise.schemas import BoardStatus, Ticket, TicketSummary
from src.utils.logger import logger


def search_conditions(query: str) -> str:
    """A numeric query is a ticket id; anything else searches summaries."""
    query = query.strip()
    if query.isdigit():
        return f"id = {int(query)}"
    escaped = query.replace("\\", "\\\\").replace('"', '\\"')
    return f'summary contains "{escaped}"'


class ConnectWiseClient:
    """Async client for one tenant's ConnectWise Manage instance.

    Authenticates with API member keys (Basic ``company+public:private``) and
    the developer ``clientId`` header.
    """

    def __init__(
        self,
        credentials: ConnectWiseCredentials,
        settings: ConnectWiseSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize ConnectWise client.

        Args:
            credentials: Tenant API credentials
            settings: Client settings (defaults to the global instance)
            transport: Optional httpx transport (for testing)
        """
        self.credentials = credentials
        self.settings = settings or get_connectwise_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.credentials.base_url.rstrip("/") + self.settings.api_path,
                auth=(
                    f"{self.credentials.company_id}+{self.credentials.public_key}",
                    self.credentials.private_key,
                ),
                headers={
                    "clientId": self.credentials.client_id,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ConnectWiseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: Any = None,
    ) -> Any:
        """Make an HTTP request to the ConnectWise API.

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            ConnectWiseError: For various API errors
        """
        await self._ensure_client()

        try:
            response = await self._client.request(
                method, endpoint, params=params, json=data
            )
        except httpx.TimeoutException as e:
            raise ConnectWiseTimeoutError(
                f"Request timed out after {self.settings.timeout:g}s"
            ) from e
        except httpx.RequestError as e:
            raise ConnectWiseError(f"Request error: {e}") from e

        if response.status_code in (401, 403):
            raise ConnectWiseAuthenticationError(
                status_code=response.status_code, response_data=response.text
            )
        elif response.status_code == 400:
            raise ConnectWiseBadRequestError(f"Bad request: {response.text}")
        elif response.status_code == 404:
            raise ConnectWiseNotFoundError(f"Not found: {endpoint}")
        elif response.status_code >= 500:
            raise ConnectWiseServerError(
                f"Server error: {response.status_code}", response.status_code
            )
        elif response.is_error:
            raise ConnectWiseError(
                f"HTTP error: {response.status_code}", response.status_code, response.text
            )

        if not response.content:
            return None
        return response.json()

    async def search_tickets(
        self, query: str, limit: int | None = None
    ) -> list[TicketSummary]:
        """Search service tickets by id or summary text, newest first."""
        data = await self._make_request(
            "GET",
            "/service/tickets",
            params={
                "conditions": search_conditions(query),
                "orderBy": "id desc",
                "pageSize": limit or self.settings.search_page_size,
            },
        )
        try:
            return [TicketSummary.from_ticket(Ticket(**item)) for item in data or []]
        except ValidationError as e:
            logger.error("Failed to parse ticket search response", error=str(e))
            raise ConnectWiseError(f"Invalid response format: {e}") from e

    async def get_ticket(self, ticket_id: int) -> Ticket | None:
        try:
            data = await self._make_request("GET", f"/service/tickets/{ticket_id}")
        except ConnectWiseNotFoundError:
            return None
        return Ticket(**data)

    async def add_note(
        self,
        ticket_id: int,
        text: str,
        internal: bool = False,
        member_identifier: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "text": text,
            "internalAnalysisFlag": internal,
            "detailDescriptionFlag": not internal,
        }
        if member_identifier:
            payload["member"] = {"identifier": member_identifier}

        logger.info("Adding ConnectWise ticket note", ticket_id=ticket_id)
        return await self._make_request(
            "POST", f"/service/tickets/{ticket_id}/notes", data=payload
        )

    async def add_time_entry(
        self,
        ticket_id: int,
        member_identifier: str,
        hours: float,
        notes: str | None = None,
        work_type_id: int | None = None,
        time_start: datetime | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "chargeToId": ticket_id,
            "chargeToType": "ServiceTicket",
            "member": {"identifier": member_identifier},
            "timeStart": (time_start or datetime.now(UTC))
            .replace(microsecond=0)
            .isoformat()
            .replace("+00:00", "Z"),
            "actualHours": hours,
            "billableOption": "Billable",
        }
        if notes:
            payload["notes"] = notes
        if work_type_id:
            payload["workType"] = {"id": work_type_id}

        logger.info(
            "Adding ConnectWise time entry",
            ticket_id=ticket_id,
            member=member_identifier,
            hours=hours,
        )
        return await self._make_request("POST", "/time/entries", data=payload)

    async def update_status(self, ticket_id: int, status_id: int) -> dict[str, Any]:
        """Move a ticket to another status via JSON patch."""
        return await self._make_request(
            "PATCH",
            f"/service/tickets/{ticket_id}",
            data=[{"op": "replace", "path": "status/id", "value": status_id}],
        )

    async def list_board_statuses(self, board_id: int | None = None) -> list[BoardStatus]:
        """Statuses for one board, or for every board when no id is given."""
        if board_id is None:
            boards = await self._make_request("GET", "/service/boards") or []
            statuses: list[BoardStatus] = []
            for board in boards:
                statuses.extend(await self.list_board_statuses(board["id"]))
            return statuses

        data = await self._make_request("GET", f"/service/boards/{board_id}/statuses")
        return [
            BoardStatus(
                id=item["id"],
                name=item["name"],
                board_id=(item.get("board") or {}).get("id", board_id),
                board_name=(item.get("board") or {}).get("name"),
            )
            for item in data or []
        ]

    async def test_connection(self) -> ConnectionTestResult:
        try:
            await self._make_request(
                "GET", "/company/companies", params={"pageSize": 1}
            )
        except ConnectWiseError as e:
            logger.warning("ConnectWise connection test failed", error=str(e))
            return ConnectionTestResult(success=False, message=str(e))
        return ConnectionTestResult(success=True, message="Connected to ConnectWise")
