"""
SQLAlchemy model for the operator audit log.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base, utcnow


class AuditLog(Base):
    """One change an operator made in a customer's Teams tenant."""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    operator_email: Mapped[str] = mapped_column(String(255), nullable=False)
    operator_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True, comment="Customer tenant record ID"
    )
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_user_upn: Mapped[str] = mapped_column(String(255), nullable=False)
    target_user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_user_id: Mapped[str | None] = mapped_column(String(255))
    change_type: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="e.g. bulk_voice_assignment, teams_sync"
    )
    change_description: Mapped[str] = mapped_column(Text, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(64))
    routing_policy: Mapped[str | None] = mapped_column(String(255))
    previous_phone_number: Mapped[str | None] = mapped_column(String(64))
    previous_routing_policy: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="success", comment="success, failed, partial"
    )
    error_message: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
