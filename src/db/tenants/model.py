"""
SQLAlchemy model for customer tenants.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class CustomerTenant(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A customer Microsoft 365 tenant managed by operators."""

    __tablename__ = "customer_tenants"

    azure_tenant_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Azure AD tenant ID",
    )
    tenant_name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Customer display name"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive tenants are hidden from operators",
    )

    def __repr__(self) -> str:
        return (
            f"<CustomerTenant(id={self.id}, tenant_name={self.tenant_name}, "
            f"is_active={self.is_active})>"
        )
