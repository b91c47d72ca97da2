"""
Tenant credentials management API endpoints.

Admins configure each tenant's integration credentials here. Secret fields
are write-only: they are accepted on PUT and never returned.
"""

from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from src.auth.dependencies import require_admin
from src.auth.schemas import User
from src.db.credentials.schemas import (
    INPUT_SCHEMAS,
    ConnectionTestResult,
    CredentialKind,
    TenantCredentialsResponse,
)
from src.db.dependencies import get_tenant
from src.db.tenants.model import CustomerTenant
from src.integrations.connectwise.client import ConnectWiseClient
from src.integrations.creds.dependencies import get_creds_service
from src.integrations.creds.service import TenantCredentialsService
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.dependencies import get_teams_directory
from src.integrations.threecx.client import ThreeCXClient
from src.utils.logger import logger

router = APIRouter(prefix="/tenants/{tenant_id}/credentials", tags=["Credentials"])


class ConnectionTestRequest(BaseModel):
    security_code: str | None = None


@router.put("/{kind}", response_model=TenantCredentialsResponse)
async def save_credentials(
    kind: CredentialKind,
    payload: dict[str, Any] = Body(...),
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(require_admin),
    creds_service: TenantCredentialsService = Depends(get_creds_service),
) -> TenantCredentialsResponse:
    """
    Create or replace a tenant's credentials for one integration.

    On replace, omitted secret fields keep their stored values.

    Raises:
        HTTPException: 422 if the payload does not match the integration's schema
    """
    try:
        data = INPUT_SCHEMAS[kind].model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_input=False),
        ) from e

    record = await creds_service.save_credentials(tenant.id, kind, data, current_user.id)
    logger.info(
        "Saved tenant credentials",
        tenant_id=tenant.id,
        kind=kind.value,
        user_id=current_user.id,
    )
    return TenantCredentialsResponse.from_record(record)


@router.get("/{kind}", response_model=TenantCredentialsResponse)
async def get_credentials(
    kind: CredentialKind,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(require_admin),
    creds_service: TenantCredentialsService = Depends(get_creds_service),
) -> TenantCredentialsResponse:
    """Get credentials metadata and public settings; never the secrets."""
    record = await creds_service.get_record(tenant.id, kind)
    if not record:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"No {kind.value} credentials configured for this tenant",
        )
    return TenantCredentialsResponse.from_record(record)


@router.delete("/{kind}", status_code=HTTPStatus.NO_CONTENT)
async def delete_credentials(
    kind: CredentialKind,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(require_admin),
    creds_service: TenantCredentialsService = Depends(get_creds_service),
) -> None:
    if not await creds_service.delete_credentials(tenant.id, kind):
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"No {kind.value} credentials configured for this tenant",
        )


@router.post("/{kind}/test", response_model=ConnectionTestResult)
async def test_credentials(
    kind: CredentialKind,
    request: ConnectionTestRequest | None = None,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(require_admin),
    creds_service: TenantCredentialsService = Depends(get_creds_service),
    directory: TeamsDirectory = Depends(get_teams_directory),
) -> ConnectionTestResult:
    """
    Check the stored credentials against the live service.

    A failed check is a successful request with ``success: false``.
    """
    if kind == CredentialKind.POWERSHELL:
        result = await directory.test_connection(tenant.id)
    elif kind == CredentialKind.CONNECTWISE:
        credentials = await creds_service.get_connectwise_credentials(tenant.id)
        async with ConnectWiseClient(credentials) as client:
            result = await client.test_connection()
    else:
        credentials = await creds_service.get_threecx_credentials(tenant.id)
        security_code = request.security_code if request else None
        result = await ThreeCXClient(credentials).test_connection(security_code)

    logger.info(
        "Tested tenant credentials",
        tenant_id=tenant.id,
        kind=kind.value,
        success=result.success,
    )
    return result
