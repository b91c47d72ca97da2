"""Repository for audit log database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.audit_logs.model import AuditLog
from src.db.audit_logs.schemas import AuditLogCreate


class AuditLogRepository:
    """Append-only access to the audit log."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_many(self, entries: list[AuditLogCreate]) -> list[AuditLog]:
        rows = [AuditLog(**entry.model_dump(mode="json")) for entry in entries]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def list_recent(
        self, tenant_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[AuditLog]:
        query = select(AuditLog).order_by(AuditLog.timestamp.desc())
        if tenant_id:
            query = query.where(AuditLog.tenant_id == tenant_id)
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())
