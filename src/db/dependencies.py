"""
FastAPI dependencies for database services.

Provides dependency injection for repositories and tenant lookup.
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.audit_logs.repository import AuditLogRepository
from src.db.database import get_db
from src.db.feature_flags.repository import FeatureFlagRepository
from src.db.profiles.repository import ProfileRepository
from src.db.tenants.model import CustomerTenant
from src.db.tenants.repository import TenantRepository


def get_tenant_repository(
    session: AsyncSession = Depends(get_db),
) -> TenantRepository:
    """
    FastAPI dependency for getting the tenant repository.

    Args:
        session: Database session from get_db dependency

    Returns:
        TenantRepository: Repository instance with injected session
    """
    return TenantRepository(session)


def get_profile_repository(
    session: AsyncSession = Depends(get_db),
) -> ProfileRepository:
    return ProfileRepository(session)


def get_audit_log_repository(
    session: AsyncSession = Depends(get_db),
) -> AuditLogRepository:
    return AuditLogRepository(session)


def get_feature_flag_repository(
    session: AsyncSession = Depends(get_db),
) -> FeatureFlagRepository:
    return FeatureFlagRepository(session)


async def get_tenant(
    tenant_id: str,
    repository: TenantRepository = Depends(get_tenant_repository),
) -> CustomerTenant:
    """
    Resolve the ``tenant_id`` path parameter to an active tenant.

    Raises:
        HTTPException: If the tenant does not exist or is inactive
    """
    tenant = await repository.get_by_id(tenant_id)
    if not tenant or not tenant.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found"
        )
    return tenant
