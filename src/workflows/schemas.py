"""
Pydantic models shared by the reconciliation and bulk assignment workflows.
"""

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class TrackedField(str, Enum):
    """Record attributes compared during reconciliation."""

    DISPLAY_NAME = "display_name"
    USER_PRINCIPAL_NAME = "user_principal_name"
    POLICY = "policy"


class PhoneNumberRecord(BaseModel):
    """A line URI assignment as seen by either the directory or the inventory."""

    line_uri: str = Field(..., description="tel:+<E.164 digits>")
    display_name: str | None = Field(None, description="Assigned user display name")
    user_principal_name: str | None = Field(None, description="Assigned user UPN")
    policy: str | None = Field(None, description="Online voice routing policy")
    carrier: str | None = Field(None, description="Carrier (inventory only)")
    location: str | None = Field(None, description="Location (inventory only)")
    number_range: str | None = Field(None, description="Range (inventory only)")
    status: str | None = Field(None, description="Inventory status")
    local_id: str | None = Field(None, description="Inventory row id, if local")

    model_config = {"from_attributes": True}


class FieldDelta(BaseModel):
    field: TrackedField
    local: str | None
    remote: str | None


class UpdateEntry(BaseModel):
    line_uri: str
    local_id: str | None = None
    remote: PhoneNumberRecord
    deltas: list[FieldDelta] = Field(..., min_length=1)


class DiffSummary(BaseModel):
    teams_total: int
    local_total: int
    to_add: int
    to_update: int
    unchanged: int


class DiffResult(BaseModel):
    """
    Classification of a remote snapshot against the local inventory.

    Every remote record lands in exactly one of the three lists. Summary
    counts are derived from the lists and never stored separately.
    """

    to_add: list[PhoneNumberRecord] = Field(default_factory=list)
    to_update: list[UpdateEntry] = Field(default_factory=list)
    unchanged: list[PhoneNumberRecord] = Field(default_factory=list)
    local_total: int = 0

    @computed_field
    @property
    def summary(self) -> DiffSummary:
        return DiffSummary(
            teams_total=len(self.to_add) + len(self.to_update) + len(self.unchanged),
            local_total=self.local_total,
            to_add=len(self.to_add),
            to_update=len(self.to_update),
            unchanged=len(self.unchanged),
        )

    @property
    def has_changes(self) -> bool:
        return bool(self.to_add or self.to_update)


class ChangeAction(str, Enum):
    ADD = "add"
    UPDATE = "update"


class Change(BaseModel):
    """An operator-approved change to write into the local inventory."""

    action: ChangeAction
    line_uri: str
    local_id: str | None = None
    record: PhoneNumberRecord


class ChangeError(BaseModel):
    line_uri: str
    error: str


class ApplyResult(BaseModel):
    added: int = 0
    updated: int = 0
    errors: list[ChangeError] = Field(default_factory=list)


class RoutingPolicy(BaseModel):
    id: str = Field(..., description="Policy identity, e.g. Tag:US-National")
    name: str = Field(..., description="Policy name without the Tag: prefix")
    description: str | None = None


class AssignmentRequest(BaseModel):
    user_id: str = Field(..., description="Directory user id or UPN")
    user_name: str | None = Field(None, description="Display name for reporting")
    phone_number: str = Field(..., description="Line URI to assign")
    routing_policy: str = Field(..., description="Voice routing policy name")


class AssignmentResult(BaseModel):
    user_id: str
    user_name: str | None = None
    success: bool
    error: str | None = None
    indeterminate: bool = Field(
        default=False,
        description="True when the directory returned no result for this user",
    )
