"""
SQLAlchemy model for the per-tenant phone number inventory.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.db.phone_numbers.constants import NumberStatus, NumberType


class PhoneNumber(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A phone number tracked in a tenant's local inventory."""

    __tablename__ = "phone_number_inventory"

    tenant_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customer_tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning customer tenant",
    )
    line_uri: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="tel:+<E.164 digits>"
    )
    display_name: Mapped[str | None] = mapped_column(String(255))
    user_principal_name: Mapped[str | None] = mapped_column(String(255))

    carrier: Mapped[str | None] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255))
    usage_location: Mapped[str | None] = mapped_column(
        String(64), comment="ISO country code or usage region"
    )
    online_voice_routing_policy: Mapped[str | None] = mapped_column(String(255))

    number_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=NumberType.DID.value
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=NumberStatus.AVAILABLE.value,
        index=True,
    )

    reserved_by: Mapped[str | None] = mapped_column(String(255))
    reserved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    aging_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), comment="When an aging number becomes available"
    )
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str | None] = mapped_column(Text, comment="Comma-separated tags")
    number_range: Mapped[str | None] = mapped_column(
        String(64), comment="Range pattern, e.g. +1555123xxxx"
    )

    external_system_id: Mapped[str | None] = mapped_column(String(255))
    external_system_type: Mapped[str | None] = mapped_column(String(64))

    created_by: Mapped[str | None] = mapped_column(String(255))
    last_modified_by: Mapped[str | None] = mapped_column(String(255))

    __table_args__ = (
        UniqueConstraint("tenant_id", "line_uri", name="uq_inventory_tenant_line_uri"),
        Index("idx_inventory_tenant_status", "tenant_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<PhoneNumber(id={self.id}, tenant_id={self.tenant_id}, "
            f"line_uri={self.line_uri}, status={self.status})>"
        )
