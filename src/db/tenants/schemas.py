"""Pydantic schemas for customer tenants."""

from datetime import datetime

from pydantic import BaseModel, Field


class TenantBase(BaseModel):
    azure_tenant_id: str = Field(..., min_length=1, description="Azure AD tenant ID")
    tenant_name: str = Field(..., min_length=1, max_length=255)


class TenantCreate(TenantBase):
    """Schema for registering a tenant."""

    pass


class TenantUpdate(BaseModel):
    """Schema for updating a tenant; omitted fields are unchanged."""

    tenant_name: str | None = Field(None, min_length=1, max_length=255)
    is_active: bool | None = None


class TenantResponse(TenantBase):
    id: str = Field(..., description="Tenant record UUID")
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
