"""
Phone number inventory router.

Numbers are scoped to a customer tenant. Every route requires the
``number_management`` feature.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_tenant
from src.db.feature_flags.dependencies import require_feature
from src.db.feature_flags.schemas import FeatureKey
from src.db.phone_numbers.constants import NumberStatus, NumberType
from src.db.phone_numbers.dependencies import get_phone_number_service
from src.db.phone_numbers.schemas import (
    BulkImportRequest,
    BulkImportResponse,
    LifecycleRunResult,
    LifecycleStats,
    NextAvailableRequest,
    NextAvailableResponse,
    NumberStatistics,
    PhoneNumberCreate,
    PhoneNumberResponse,
    PhoneNumberUpdate,
    ReserveRequest,
)
from src.db.phone_numbers.service import PhoneNumberService
from src.db.tenants.model import CustomerTenant

router = APIRouter(
    prefix="/tenants/{tenant_id}/numbers",
    tags=["Phone Numbers"],
    dependencies=[Depends(require_feature(FeatureKey.NUMBER_MANAGEMENT))],
)


@router.get("", response_model=list[PhoneNumberResponse])
async def list_numbers(
    status: NumberStatus | None = Query(None, description="Filter by status"),
    number_type: NumberType | None = Query(None, description="Filter by number type"),
    search: str | None = Query(None, description="Match line URI, user or name"),
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> list[PhoneNumberResponse]:
    numbers = await service.list_numbers(
        tenant.id,
        status_filter=status.value if status else None,
        number_type=number_type.value if number_type else None,
        search=search,
    )
    return [PhoneNumberResponse.model_validate(n) for n in numbers]


@router.post("", response_model=PhoneNumberResponse, status_code=HTTPStatus.CREATED)
async def create_number(
    data: PhoneNumberCreate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> PhoneNumberResponse:
    """
    Add a number to the tenant's inventory.

    Raises:
        HTTPException: 422 for an invalid line URI, 409 if it already exists
    """
    number = await service.create_number(tenant.id, data, current_user.email)
    return PhoneNumberResponse.model_validate(number)


@router.post("/import", response_model=BulkImportResponse)
async def import_numbers(
    request: BulkImportRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> BulkImportResponse:
    """Import many numbers; invalid or duplicate rows are reported, not fatal."""
    return await service.bulk_import(tenant.id, request.numbers, current_user.email)


@router.get("/statistics", response_model=NumberStatistics)
async def number_statistics(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> NumberStatistics:
    return await service.statistics(tenant.id)


@router.post("/next-available", response_model=NextAvailableResponse)
async def next_available_number(
    request: NextAvailableRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> NextAvailableResponse:
    """Find the lowest unused number matching an ``x``-wildcard range."""
    return await service.next_available(tenant.id, request.number_range)


@router.post("/lifecycle/run", response_model=LifecycleRunResult)
async def run_lifecycle(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> LifecycleRunResult:
    """Return numbers whose aging period has ended to the available pool."""
    return await service.run_lifecycle(tenant.id)


@router.get("/lifecycle/stats", response_model=LifecycleStats)
async def lifecycle_stats(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> LifecycleStats:
    return await service.lifecycle_stats(tenant.id)


@router.get("/{number_id}", response_model=PhoneNumberResponse)
async def get_number(
    number_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> PhoneNumberResponse:
    number = await service.get_number(tenant.id, number_id)
    return PhoneNumberResponse.model_validate(number)


@router.patch("/{number_id}", response_model=PhoneNumberResponse)
async def update_number(
    number_id: str,
    data: PhoneNumberUpdate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> PhoneNumberResponse:
    number = await service.update_number(tenant.id, number_id, data, current_user.email)
    return PhoneNumberResponse.model_validate(number)


@router.delete("/{number_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_number(
    number_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> None:
    await service.delete_number(tenant.id, number_id)


@router.post("/{number_id}/reserve", response_model=PhoneNumberResponse)
async def reserve_number(
    number_id: str,
    request: ReserveRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> PhoneNumberResponse:
    """
    Hold an available number.

    Raises:
        HTTPException: 409 if the number is not available
    """
    number = await service.reserve(
        tenant.id,
        number_id,
        request.reserved_by or current_user.email,
        current_user.email,
    )
    return PhoneNumberResponse.model_validate(number)


@router.post("/{number_id}/release", response_model=PhoneNumberResponse)
async def release_number(
    number_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    service: PhoneNumberService = Depends(get_phone_number_service),
) -> PhoneNumberResponse:
    """Move a reserved number into the aging period."""
    number = await service.release(tenant.id, number_id, current_user.email)
    return PhoneNumberResponse.model_validate(number)
