"""
SQLAlchemy model for configuration profiles.
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ConfigurationProfile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Reusable assignment template scoped to one tenant."""

    __tablename__ = "configuration_profiles"

    tenant_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customer_tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning customer tenant",
    )
    profile_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number_prefix: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="e.g. tel:+1555"
    )
    default_routing_policy: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
