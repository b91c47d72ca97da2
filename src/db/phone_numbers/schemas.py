"""
Pydantic schemas for the phone number inventory API.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from src.db.phone_numbers.constants import NumberStatus, NumberType
from src.workflows.validation import validate_line_uri


def _checked_line_uri(value: str) -> str:
    result = validate_line_uri(value)
    if not result.valid:
        raise ValueError(result.reason)
    return value


LineUri = Annotated[str, AfterValidator(_checked_line_uri)]


class PhoneNumberFields(BaseModel):
    """Optional descriptive fields shared by create and update."""

    display_name: str | None = None
    user_principal_name: str | None = None
    carrier: str | None = None
    location: str | None = None
    usage_location: str | None = None
    online_voice_routing_policy: str | None = None
    notes: str | None = None
    tags: str | None = Field(None, description="Comma-separated tags")
    number_range: str | None = Field(None, description="e.g. +1555123xxxx")
    external_system_id: str | None = None
    external_system_type: str | None = None


class PhoneNumberCreate(PhoneNumberFields):
    """Request schema for adding a number to the inventory."""

    line_uri: LineUri = Field(..., description="tel:+<E.164 digits>")
    number_type: NumberType = NumberType.DID
    status: NumberStatus = NumberStatus.AVAILABLE


class PhoneNumberUpdate(PhoneNumberFields):
    """Request schema for editing a number; omitted fields are unchanged."""

    line_uri: LineUri | None = None
    number_type: NumberType | None = None
    status: NumberStatus | None = None


class PhoneNumberResponse(PhoneNumberFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    line_uri: str
    number_type: str
    status: str
    reserved_by: str | None = None
    reserved_at: datetime | None = None
    aging_until: datetime | None = None
    assigned_at: datetime | None = None
    created_by: str | None = None
    last_modified_by: str | None = None
    created_at: datetime
    updated_at: datetime


class PhoneNumberImportRow(PhoneNumberFields):
    """One row of a bulk import; validated per row by the service."""

    line_uri: str
    number_type: NumberType = NumberType.DID
    status: NumberStatus = NumberStatus.AVAILABLE


class BulkImportRequest(BaseModel):
    numbers: list[PhoneNumberImportRow] = Field(..., min_length=1)


class ImportFailure(BaseModel):
    line_uri: str
    error: str


class BulkImportResponse(BaseModel):
    created: int
    failed: list[ImportFailure] = Field(default_factory=list)


class NumberStatistics(BaseModel):
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]


class NextAvailableRequest(BaseModel):
    number_range: str = Field(
        ..., description="Pattern with x wildcards, e.g. tel:+1555123xxxx or 1234xxx"
    )


class NextAvailableResponse(BaseModel):
    number_range: str
    available: bool
    next_available: str | None = None
    next_variable_digits: str | None = None
    total_capacity: int
    used_count: int
    remaining_capacity: int
    utilization_percent: int


class ReserveRequest(BaseModel):
    reserved_by: str | None = Field(
        None, description="Who the number is held for; defaults to the operator"
    )


class LifecycleRunResult(BaseModel):
    aging_to_available: int
    timestamp: datetime


class LifecycleStats(BaseModel):
    total: int
    available: int
    used: int
    reserved: int
    aging: int
    aging_expiring_soon: int
