"""
Repository for phone number inventory database operations.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.phone_numbers.constants import NumberStatus
from src.db.phone_numbers.model import PhoneNumber


class PhoneNumberRepository:
    """Repository for managing inventory rows in the database."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def create(self, tenant_id: str, **fields: Any) -> PhoneNumber:
        number = PhoneNumber(tenant_id=tenant_id, **fields)
        self.session.add(number)
        await self.session.flush()
        await self.session.refresh(number)
        return number

    async def get_by_id(self, tenant_id: str, number_id: str) -> PhoneNumber | None:
        result = await self.session.execute(
            select(PhoneNumber).where(
                PhoneNumber.tenant_id == tenant_id, PhoneNumber.id == number_id
            )
        )
        return result.scalar_one_or_none()

    async def get_by_line_uri(self, tenant_id: str, line_uri: str) -> PhoneNumber | None:
        result = await self.session.execute(
            select(PhoneNumber).where(
                PhoneNumber.tenant_id == tenant_id, PhoneNumber.line_uri == line_uri
            )
        )
        return result.scalar_one_or_none()

    async def list_numbers(
        self,
        tenant_id: str,
        status: str | None = None,
        number_type: str | None = None,
        search: str | None = None,
    ) -> list[PhoneNumber]:
        """
        List a tenant's numbers ordered by line URI.

        Args:
            tenant_id: Owning tenant
            status: Optional lifecycle status filter
            number_type: Optional number type filter
            search: Optional case-insensitive match on line URI, name or UPN

        Returns:
            List of inventory rows
        """
        query = select(PhoneNumber).where(PhoneNumber.tenant_id == tenant_id)
        if status:
            query = query.where(PhoneNumber.status == status)
        if number_type:
            query = query.where(PhoneNumber.number_type == number_type)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    PhoneNumber.line_uri.ilike(pattern),
                    PhoneNumber.display_name.ilike(pattern),
                    PhoneNumber.user_principal_name.ilike(pattern),
                )
            )
        result = await self.session.execute(query.order_by(PhoneNumber.line_uri))
        return list(result.scalars().all())

    async def list_line_uris(self, tenant_id: str) -> list[str]:
        result = await self.session.execute(
            select(PhoneNumber.line_uri).where(PhoneNumber.tenant_id == tenant_id)
        )
        return list(result.scalars().all())

    async def update(self, number: PhoneNumber, **fields: Any) -> PhoneNumber:
        for key, value in fields.items():
            setattr(number, key, value)
        await self.session.flush()
        await self.session.refresh(number)
        return number

    async def delete(self, number: PhoneNumber) -> None:
        await self.session.delete(number)
        await self.session.flush()

    async def count_by(self, tenant_id: str, column: str) -> dict[str, int]:
        """Count a tenant's numbers grouped by ``status`` or ``number_type``."""
        attribute = getattr(PhoneNumber, column)
        result = await self.session.execute(
            select(attribute, func.count())
            .where(PhoneNumber.tenant_id == tenant_id)
            .group_by(attribute)
        )
        return {key: count for key, count in result.all()}

    async def list_expired_aging(self, tenant_id: str, now: datetime) -> list[PhoneNumber]:
        result = await self.session.execute(
            select(PhoneNumber).where(
                PhoneNumber.tenant_id == tenant_id,
                PhoneNumber.status == NumberStatus.AGING.value,
                PhoneNumber.aging_until < now,
            )
        )
        return list(result.scalars().all())

    async def count_aging_before(self, tenant_id: str, cutoff: datetime) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(PhoneNumber)
            .where(
                PhoneNumber.tenant_id == tenant_id,
                PhoneNumber.status == NumberStatus.AGING.value,
                PhoneNumber.aging_until <= cutoff,
            )
        )
        return result.scalar_one()
