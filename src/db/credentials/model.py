"""
SQLAlchemy model for tenant integration credentials.

Stores non-secret settings and a reference to the AWS Secrets Manager secret
that holds the secret fields. Secret values never touch the database.
"""

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class TenantCredentials(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Credentials reference for one integration of one tenant."""

    __tablename__ = "tenant_credentials"

    tenant_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customer_tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning customer tenant",
    )
    kind: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Integration (powershell, connectwise, threecx)",
    )
    settings: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="Non-secret settings"
    )
    secret_arn: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="AWS Secrets Manager ARN for the secret fields",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )
    created_by: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Operator who saved the credentials"
    )

    __table_args__ = (
        Index(
            "uq_tenant_active_credentials",
            "tenant_id",
            "kind",
            unique=True,
            postgresql_where="is_active = true",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<TenantCredentials(id={self.id}, tenant_id={self.tenant_id}, "
            f"kind={self.kind}, is_active={self.is_active})>"
        )
