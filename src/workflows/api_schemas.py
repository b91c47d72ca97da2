"""Request and response bodies for the workflow endpoints."""

from pydantic import BaseModel, Field

from src.integrations.connectwise.schemas import TicketLink, TicketUpdateResult
from src.workflows.bulk import BulkProgress, DirectoryUser
from src.workflows.schemas import AssignmentRequest, AssignmentResult


class SyncSelectionRequest(BaseModel):
    """Line URIs to keep selected; an omitted list is left unchanged."""

    to_add: list[str] | None = None
    to_update: list[str] | None = None


class BulkAssignRequest(BaseModel):
    assignments: list[AssignmentRequest] = Field(..., min_length=1)
    ticket: TicketLink | None = Field(
        None, description="ConnectWise ticket to document the change on"
    )


class BulkAssignSummary(BaseModel):
    total: int
    succeeded: int
    failed: int
    indeterminate: int


class BulkAssignResponse(BaseModel):
    results: list[AssignmentResult]
    summary: BulkAssignSummary
    progress: list[BulkProgress] = Field(
        default_factory=list, description="Phase reports; percentages are estimates"
    )
    ticket_update: TicketUpdateResult | None = None


class BulkPreviewRequest(BaseModel):
    users: list[DirectoryUser] = Field(..., min_length=1)
    profile_id: str | None = Field(
        None, description="Configuration profile supplying prefix and policy"
    )
    phone_number_prefix: str | None = None
    routing_policy: str | None = None
    starting_number: str | None = Field(
        None, description="First suffix; its width sets zero padding"
    )


class BulkPreviewResponse(BaseModel):
    assignments: list[AssignmentRequest]
    validation: list[AssignmentResult]
    invalid_count: int
