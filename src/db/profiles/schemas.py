"""Pydantic schemas for configuration profiles."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

PREFIX_START = "tel:+"


class ProfileFields(BaseModel):
    profile_name: str = Field(..., min_length=1, max_length=255)
    phone_number_prefix: str = Field(..., min_length=1, description="e.g. tel:+1555")
    default_routing_policy: str = Field(..., min_length=1)
    description: str | None = None

    @field_validator("profile_name", "default_routing_policy")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("phone_number_prefix")
    @classmethod
    def prefix_is_tel_uri(cls, value: str) -> str:
        if not value.startswith(PREFIX_START):
            raise ValueError(f"Phone number prefix must start with '{PREFIX_START}'")
        return value


class ProfileCreate(ProfileFields):
    pass


class ProfileUpdate(ProfileFields):
    """Full replacement of a profile's fields.

    ``tenant_id`` is accepted only so a change of tenant can be refused.
    """

    tenant_id: str | None = None


class ProfileResponse(ProfileFields):
    id: str
    tenant_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileDefaults(BaseModel):
    """Values an applied profile pre-fills in the assignment forms."""

    profile_id: str
    phone_number_prefix: str
    routing_policy: str
