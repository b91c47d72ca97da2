"""create_voice_manager_tables

Revision ID: 3c1f0a9d7e21
Revises:
Create Date: 2026-10-18 09:12:40.118305

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d7e21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
            comment="Record creation timestamp",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
            comment="Record last update timestamp",
        ),
    ]


def _tenant_fk() -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.String(length=36),
        sa.ForeignKey("customer_tenants.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning customer tenant",
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "customer_tenants",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Record UUID"),
        sa.Column(
            "azure_tenant_id",
            sa.String(length=64),
            nullable=False,
            comment="Azure AD tenant ID",
        ),
        sa.Column(
            "tenant_name",
            sa.String(length=255),
            nullable=False,
            comment="Customer display name",
        ),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
            comment="Inactive tenants are hidden from operators",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("azure_tenant_id"),
    )

    op.create_table(
        "phone_number_inventory",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Record UUID"),
        _tenant_fk(),
        sa.Column(
            "line_uri",
            sa.String(length=64),
            nullable=False,
            comment="tel:+<E.164 digits>",
        ),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("user_principal_name", sa.String(length=255), nullable=True),
        sa.Column("carrier", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column(
            "usage_location",
            sa.String(length=64),
            nullable=True,
            comment="ISO country code or usage region",
        ),
        sa.Column("online_voice_routing_policy", sa.String(length=255), nullable=True),
        sa.Column(
            "number_type",
            sa.String(length=20),
            nullable=False,
            server_default="did",
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            server_default="available",
        ),
        sa.Column("reserved_by", sa.String(length=255), nullable=True),
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "aging_until",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="When an aging number becomes available",
        ),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True, comment="Comma-separated tags"),
        sa.Column(
            "number_range",
            sa.String(length=64),
            nullable=True,
            comment="Range pattern, e.g. +1555123xxxx",
        ),
        sa.Column("external_system_id", sa.String(length=255), nullable=True),
        sa.Column("external_system_type", sa.String(length=64), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("last_modified_by", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id", "line_uri", name="uq_inventory_tenant_line_uri"
        ),
    )
    op.create_index(
        op.f("ix_phone_number_inventory_tenant_id"),
        "phone_number_inventory",
        ["tenant_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_phone_number_inventory_status"),
        "phone_number_inventory",
        ["status"],
        unique=False,
    )
    op.create_index(
        "idx_inventory_tenant_status",
        "phone_number_inventory",
        ["tenant_id", "status"],
        unique=False,
    )

    op.create_table(
        "configuration_profiles",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Record UUID"),
        _tenant_fk(),
        sa.Column("profile_name", sa.String(length=255), nullable=False),
        sa.Column(
            "phone_number_prefix",
            sa.String(length=64),
            nullable=False,
            comment="e.g. tel:+1555",
        ),
        sa.Column("default_routing_policy", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_configuration_profiles_tenant_id"),
        "configuration_profiles",
        ["tenant_id"],
        unique=False,
    )

    op.create_table(
        "tenant_credentials",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Record UUID"),
        _tenant_fk(),
        sa.Column(
            "kind",
            sa.String(length=32),
            nullable=False,
            comment="Integration (powershell, connectwise, threecx)",
        ),
        sa.Column(
            "settings",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Non-secret settings",
        ),
        sa.Column(
            "secret_arn",
            sa.String(length=512),
            nullable=False,
            comment="AWS Secrets Manager ARN for the secret fields",
        ),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "created_by",
            sa.String(length=255),
            nullable=False,
            comment="Operator who saved the credentials",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_tenant_credentials_tenant_id"),
        "tenant_credentials",
        ["tenant_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_tenant_credentials_is_active"),
        "tenant_credentials",
        ["is_active"],
        unique=False,
    )
    op.create_index(
        "uq_tenant_active_credentials",
        "tenant_credentials",
        ["tenant_id", "kind"],
        unique=True,
        postgresql_where=sa.text("is_active = true"),
    )

    # Audit rows outlive their tenant, so no foreign key
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("operator_email", sa.String(length=255), nullable=False),
        sa.Column("operator_name", sa.String(length=255), nullable=False),
        sa.Column(
            "tenant_id",
            sa.String(length=36),
            nullable=False,
            comment="Customer tenant record ID",
        ),
        sa.Column("tenant_name", sa.String(length=255), nullable=False),
        sa.Column("target_user_upn", sa.String(length=255), nullable=False),
        sa.Column("target_user_name", sa.String(length=255), nullable=False),
        sa.Column("target_user_id", sa.String(length=255), nullable=True),
        sa.Column(
            "change_type",
            sa.String(length=64),
            nullable=False,
            comment="e.g. bulk_voice_assignment, teams_sync",
        ),
        sa.Column("change_description", sa.Text(), nullable=False),
        sa.Column("phone_number", sa.String(length=64), nullable=True),
        sa.Column("routing_policy", sa.String(length=255), nullable=True),
        sa.Column("previous_phone_number", sa.String(length=64), nullable=True),
        sa.Column("previous_routing_policy", sa.String(length=255), nullable=True),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            server_default="success",
            comment="success, failed, partial",
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_audit_logs_tenant_id"), "audit_logs", ["tenant_id"], unique=False
    )
    op.create_index(
        op.f("ix_audit_logs_timestamp"), "audit_logs", ["timestamp"], unique=False
    )

    feature_flags = op.create_table(
        "feature_flags",
        sa.Column("feature_key", sa.String(length=64), nullable=False),
        sa.Column(
            "is_enabled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("feature_key"),
    )
    op.bulk_insert(
        feature_flags,
        [
            {
                "feature_key": "number_management",
                "is_enabled": False,
                "description": "Phone number inventory management",
            },
            {
                "feature_key": "bulk_assignment",
                "is_enabled": False,
                "description": "Bulk phone number and routing policy assignment",
            },
            {
                "feature_key": "connectwise_integration",
                "is_enabled": False,
                "description": "ConnectWise ticket search and documentation",
            },
        ],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("feature_flags")
    op.drop_index(op.f("ix_audit_logs_timestamp"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_tenant_id"), table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("uq_tenant_active_credentials", table_name="tenant_credentials")
    op.drop_index(
        op.f("ix_tenant_credentials_is_active"), table_name="tenant_credentials"
    )
    op.drop_index(
        op.f("ix_tenant_credentials_tenant_id"), table_name="tenant_credentials"
    )
    op.drop_table("tenant_credentials")
    op.drop_index(
        op.f("ix_configuration_profiles_tenant_id"),
        table_name="configuration_profiles",
    )
    op.drop_table("configuration_profiles")
    op.drop_index("idx_inventory_tenant_status", table_name="phone_number_inventory")
    op.drop_index(
        op.f("ix_phone_number_inventory_status"), table_name="phone_number_inventory"
    )
    op.drop_index(
        op.f("ix_phone_number_inventory_tenant_id"),
        table_name="phone_number_inventory",
    )
    op.drop_table("phone_number_inventory")
    op.drop_table("customer_tenants")
