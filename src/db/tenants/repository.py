"""Repository for customer tenant database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tenants.model import CustomerTenant
from src.db.tenants.schemas import TenantCreate, TenantUpdate


class TenantRepository:
    """Repository for managing customer tenants in the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, data: TenantCreate) -> CustomerTenant:
        tenant = CustomerTenant(
            azure_tenant_id=data.azure_tenant_id, tenant_name=data.tenant_name
        )
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def get_by_id(self, tenant_id: str) -> CustomerTenant | None:
        result = await self.session.execute(
            select(CustomerTenant).where(CustomerTenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_azure_tenant_id(self, azure_tenant_id: str) -> CustomerTenant | None:
        result = await self.session.execute(
            select(CustomerTenant).where(
                CustomerTenant.azure_tenant_id == azure_tenant_id
            )
        )
        return result.scalar_one_or_none()

    async def list_all(self, include_inactive: bool = False) -> list[CustomerTenant]:
        """
        List tenants ordered by name.

        Args:
            include_inactive: Whether to include deactivated tenants

        Returns:
            List of tenant models
        """
        query = select(CustomerTenant).order_by(CustomerTenant.tenant_name)
        if not include_inactive:
            query = query.where(CustomerTenant.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, tenant_id: str, data: TenantUpdate) -> CustomerTenant | None:
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return None

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(tenant, key, value)

        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def delete(self, tenant_id: str) -> bool:
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return False

        await self.session.delete(tenant)
        await self.session.flush()
        return True
