"""
Customer tenant router.

Operators can list tenants to pick one to work in; registering, editing and
removing tenants is restricted to admins.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query

from src.auth.constants import Role
from src.auth.dependencies import get_current_user, require_admin
from src.auth.schemas import User
from src.db.dependencies import get_tenant_repository
from src.db.tenants.repository import TenantRepository
from src.db.tenants.schemas import TenantCreate, TenantResponse, TenantUpdate
from src.utils.logger import logger
from src.workflows.sync import get_sync_registry

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    include_inactive: bool = Query(False, description="Admins only"),
    current_user: User = Depends(get_current_user),
    repository: TenantRepository = Depends(get_tenant_repository),
) -> list[TenantResponse]:
    if include_inactive and current_user.role != Role.ADMIN:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail="Admin access required")
    tenants = await repository.list_all(include_inactive=include_inactive)
    return [TenantResponse.model_validate(t) for t in tenants]


@router.post("", response_model=TenantResponse, status_code=HTTPStatus.CREATED)
async def create_tenant(
    data: TenantCreate,
    current_user: User = Depends(require_admin),
    repository: TenantRepository = Depends(get_tenant_repository),
) -> TenantResponse:
    """
    Register a customer tenant.

    Raises:
        HTTPException: 409 if the Azure tenant is already registered
    """
    if await repository.get_by_azure_tenant_id(data.azure_tenant_id):
        raise HTTPException(
            status_code=HTTPStatus.CONFLICT,
            detail=f"Tenant {data.azure_tenant_id} is already registered",
        )
    tenant = await repository.create(data)
    logger.info(
        "Tenant created",
        tenant_id=tenant.id,
        azure_tenant_id=tenant.azure_tenant_id,
        user_id=current_user.id,
    )
    return TenantResponse.model_validate(tenant)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant_by_id(
    tenant_id: str,
    current_user: User = Depends(get_current_user),
    repository: TenantRepository = Depends(get_tenant_repository),
) -> TenantResponse:
    tenant = await repository.get_by_id(tenant_id)
    if not tenant:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Tenant not found")
    return TenantResponse.model_validate(tenant)


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: str,
    data: TenantUpdate,
    current_user: User = Depends(require_admin),
    repository: TenantRepository = Depends(get_tenant_repository),
) -> TenantResponse:
    tenant = await repository.update(tenant_id, data)
    if not tenant:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Tenant not found")
    if not tenant.is_active:
        get_sync_registry().discard(tenant_id)
    return TenantResponse.model_validate(tenant)


@router.delete("/{tenant_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    current_user: User = Depends(require_admin),
    repository: TenantRepository = Depends(get_tenant_repository),
) -> None:
    """Delete a tenant and everything scoped to it."""
    if not await repository.delete(tenant_id):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Tenant not found")
    get_sync_registry().discard(tenant_id)
    logger.info("Tenant deleted", tenant_id=tenant_id, user_id=current_user.id)
