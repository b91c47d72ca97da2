"""
ConnectWise PSA endpoints.

Lets operators find the ticket a voice change belongs to and document work on
it. Gated by the ``connectwise_integration`` feature flag.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_tenant
from src.db.feature_flags.dependencies import require_feature
from src.db.feature_flags.schemas import FeatureKey
from src.db.tenants.model import CustomerTenant
from src.integrations.connectwise.dependencies import get_connectwise_service
from src.integrations.connectwise.exceptions import (
    ConnectWiseError,
    ConnectWiseNotFoundError,
    ConnectWiseTimeoutError,
)
from src.integrations.connectwise.schemas import (
    BoardStatus,
    NoteCreate,
    StatusUpdate,
    Ticket,
    TicketSummary,
    TimeEntryCreate,
)
from src.integrations.connectwise.service import ConnectWiseService

router = APIRouter(
    prefix="/tenants/{tenant_id}/connectwise",
    tags=["ConnectWise"],
    dependencies=[Depends(require_feature(FeatureKey.CONNECTWISE_INTEGRATION))],
)


def to_http_exception(error: ConnectWiseError) -> HTTPException:
    if isinstance(error, ConnectWiseNotFoundError):
        code = HTTPStatus.NOT_FOUND
    elif isinstance(error, ConnectWiseTimeoutError):
        code = HTTPStatus.GATEWAY_TIMEOUT
    else:
        code = HTTPStatus.BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(error))


@router.get("/tickets", response_model=list[TicketSummary])
async def search_tickets(
    q: str = Query(..., min_length=1, description="Ticket number or summary text"),
    limit: int = Query(25, ge=1, le=100),
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> list[TicketSummary]:
    async with await service.client(tenant.id) as client:
        try:
            return await client.search_tickets(q, limit)
        except ConnectWiseError as e:
            raise to_http_exception(e) from e


@router.get("/tickets/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: int,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> Ticket:
    async with await service.client(tenant.id) as client:
        try:
            ticket = await client.get_ticket(ticket_id)
        except ConnectWiseError as e:
            raise to_http_exception(e) from e
    if ticket is None:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Ticket not found")
    return ticket


@router.post("/tickets/{ticket_id}/notes", status_code=HTTPStatus.CREATED)
async def add_note(
    ticket_id: int,
    request: NoteCreate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> dict | None:
    async with await service.client(tenant.id) as client:
        try:
            return await client.add_note(
                ticket_id, request.text, request.internal, request.member_identifier
            )
        except ConnectWiseError as e:
            raise to_http_exception(e) from e


@router.post("/tickets/{ticket_id}/time-entries", status_code=HTTPStatus.CREATED)
async def add_time_entry(
    ticket_id: int,
    request: TimeEntryCreate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> dict | None:
    """
    Log time against a ticket.

    Minutes default to the tenant's configured ``default_time_minutes``.
    """
    async with await service.client(tenant.id) as client:
        minutes = request.minutes or client.credentials.default_time_minutes
        try:
            return await client.add_time_entry(
                ticket_id,
                request.member_identifier,
                minutes / 60,
                notes=request.notes,
                work_type_id=request.work_type_id,
                time_start=request.time_start,
            )
        except ConnectWiseError as e:
            raise to_http_exception(e) from e


@router.patch("/tickets/{ticket_id}/status")
async def update_ticket_status(
    ticket_id: int,
    request: StatusUpdate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> dict | None:
    async with await service.client(tenant.id) as client:
        try:
            return await client.update_status(ticket_id, request.status_id)
        except ConnectWiseError as e:
            raise to_http_exception(e) from e


@router.get("/statuses", response_model=list[BoardStatus])
async def list_statuses(
    board_id: int | None = Query(None, description="Limit to one service board"),
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: ConnectWiseService = Depends(get_connectwise_service),
) -> list[BoardStatus]:
    async with await service.client(tenant.id) as client:
        try:
            return await client.list_board_statuses(board_id)
        except ConnectWiseError as e:
            raise to_http_exception(e) from e
