"""Pydantic schemas for audit log entries."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


class ChangeType(str, Enum):
    BULK_VOICE_ASSIGNMENT = "bulk_voice_assignment"
    TEAMS_SYNC = "teams_sync"


class AuditLogCreate(BaseModel):
    operator_email: str
    operator_name: str
    tenant_id: str
    tenant_name: str
    target_user_upn: str
    target_user_name: str
    target_user_id: str | None = None
    change_type: ChangeType
    change_description: str
    phone_number: str | None = None
    routing_policy: str | None = None
    previous_phone_number: str | None = None
    previous_routing_policy: str | None = None
    status: AuditStatus = AuditStatus.SUCCESS
    error_message: str | None = None


class AuditLogResponse(AuditLogCreate):
    id: str
    change_type: str
    status: str
    timestamp: datetime

    model_config = {"from_attributes": True}
