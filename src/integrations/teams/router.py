"""
Microsoft Teams API endpoints.

Policy listing for the operator UI and interactive PowerShell sessions for
operators who sign in with MFA instead of certificates.
"""

import asyncio
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_tenant
from src.db.tenants.model import CustomerTenant
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.constants import POLICY_TYPES, PolicyType
from src.integrations.teams.dependencies import get_teams_directory
from src.integrations.teams.exceptions import TeamsError, TeamsScriptTimeoutError
from src.integrations.teams.schemas import (
    MfaCodeRequest,
    PolicyListResponse,
    SessionInfo,
    SSEEvent,
)
from src.integrations.teams.session import (
    SessionManager,
    SessionNotFoundError,
    get_session_manager,
)
from src.utils.logger import logger
from src.workflows.schemas import RoutingPolicy

router = APIRouter(prefix="/teams", tags=["Teams"])

HEARTBEAT_SECONDS = 20.0


def to_http_exception(error: TeamsError) -> HTTPException:
    if isinstance(error, TeamsScriptTimeoutError):
        return HTTPException(status_code=HTTPStatus.GATEWAY_TIMEOUT, detail=error.message)
    return HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=error.message)


def require_session_manager() -> SessionManager:
    manager = get_session_manager()
    if manager is None:
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail="Interactive PowerShell sessions are not available",
        )
    return manager


@router.get("/{tenant_id}/routing-policies", response_model=list[RoutingPolicy])
async def list_routing_policies(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    directory: TeamsDirectory = Depends(get_teams_directory),
) -> list[RoutingPolicy]:
    """
    List the tenant's online voice routing policies.

    Raises:
        HTTPException: 502 if Teams rejects the request, 504 on timeout
    """
    try:
        return await directory.fetch_routing_policies(tenant.id)
    except TeamsError as e:
        raise to_http_exception(e) from e


@router.get("/{tenant_id}/policies/{policy_type}", response_model=PolicyListResponse)
async def list_policies(
    policy_type: PolicyType,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    directory: TeamsDirectory = Depends(get_teams_directory),
) -> PolicyListResponse:
    try:
        policies = await directory.fetch_policies(tenant.id, policy_type)
    except TeamsError as e:
        raise to_http_exception(e) from e

    return PolicyListResponse(
        policy_type=policy_type,
        display_name=POLICY_TYPES[policy_type].display_name,
        policies=policies,
    )


@router.post(
    "/{tenant_id}/sessions",
    response_model=SessionInfo,
    status_code=HTTPStatus.CREATED,
)
async def open_session(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(require_session_manager),
) -> SessionInfo:
    """Start an interactive session, replacing the operator's previous one."""
    return await manager.open(current_user.id, tenant.id)


@router.get("/{tenant_id}/sessions", response_model=SessionInfo)
async def get_session(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(require_session_manager),
) -> SessionInfo:
    await manager.close_idle()
    try:
        return manager.get(current_user.id, tenant.id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(e)) from e


@router.post("/{tenant_id}/sessions/mfa", response_model=SessionInfo)
async def submit_mfa_code(
    request: MfaCodeRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(require_session_manager),
) -> SessionInfo:
    try:
        return await manager.send_mfa_code(current_user.id, tenant.id, request.code)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(e)) from e


@router.get("/{tenant_id}/sessions/events")
async def stream_session_events(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(require_session_manager),
) -> StreamingResponse:
    """
    Stream session output via Server-Sent Events.

    Each ``session`` event carries a JSON ``{output, error, message}`` object.
    Heartbeats are sent while the session is quiet.
    """
    try:
        events = manager.events(current_user.id, tenant.id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(e)) from e

    async def event_generator():
        iterator = events.__aiter__()
        next_event = asyncio.ensure_future(iterator.__anext__())
        try:
            while True:
                done, _ = await asyncio.wait({next_event}, timeout=HEARTBEAT_SECONDS)
                if next_event not in done:
                    yield SSEEvent(event="heartbeat", data="keep-alive").format()
                    continue
                try:
                    event = next_event.result()
                except StopAsyncIteration:
                    break
                yield SSEEvent(event="session", data=event.model_dump_json()).format()
                next_event = asyncio.ensure_future(iterator.__anext__())
            yield SSEEvent(event="done", data="disconnected").format()
        finally:
            if not next_event.done():
                next_event.cancel()
            logger.info(
                "Session event stream closed",
                operator_id=current_user.id,
                tenant_id=tenant.id,
            )

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.delete("/{tenant_id}/sessions", status_code=HTTPStatus.NO_CONTENT)
async def close_session(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(require_session_manager),
) -> None:
    if not await manager.close(current_user.id, tenant.id):
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="No PowerShell session"
        )
