"""Audit log router."""

from fastapi import APIRouter, Depends, Query

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.audit_logs.repository import AuditLogRepository
from src.db.audit_logs.schemas import AuditLogResponse
from src.db.dependencies import get_audit_log_repository

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    tenant_id: str | None = Query(None, description="Only entries for this tenant"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    repository: AuditLogRepository = Depends(get_audit_log_repository),
) -> list[AuditLogResponse]:
    """List audit entries, newest first."""
    entries = await repository.list_recent(tenant_id, limit=limit, offset=offset)
    return [AuditLogResponse.model_validate(e) for e in entries]
