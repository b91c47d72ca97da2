"""Pydantic schemas for ConnectWise PSA tickets, notes and time entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Reference(BaseModel):
    """A ConnectWise ``{id, name}`` reference."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    identifier: str | None = None


class Ticket(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    summary: str
    record_type: str | None = Field(None, alias="recordType")
    board: Reference | None = None
    status: Reference | None = None
    company: Reference | None = None
    contact: Reference | None = None
    priority: Reference | None = None


class TicketSummary(BaseModel):
    """Flattened ticket row for search results."""

    id: int
    summary: str
    status: str | None = None
    company: str | None = None
    board: str | None = None

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketSummary":
        return cls(
            id=ticket.id,
            summary=ticket.summary,
            status=ticket.status.name if ticket.status else None,
            company=ticket.company.name if ticket.company else None,
            board=ticket.board.name if ticket.board else None,
        )


class BoardStatus(BaseModel):
    id: int
    name: str
    board_id: int
    board_name: str | None = None


class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1)
    internal: bool = Field(default=False, description="Internal analysis vs. discussion")
    member_identifier: str | None = None


class TimeEntryCreate(BaseModel):
    member_identifier: str = Field(..., min_length=1)
    minutes: int | None = Field(
        None, gt=0, description="Defaults to the tenant's configured minutes"
    )
    notes: str | None = None
    work_type_id: int | None = None
    time_start: datetime | None = None


class StatusUpdate(BaseModel):
    status_id: int


class TicketLink(BaseModel):
    """Ticket to document a bulk assignment on."""

    ticket_id: int
    member_identifier: str | None = Field(
        None, description="ConnectWise member to log time for; no time entry if omitted"
    )


class TicketUpdateResult(BaseModel):
    ticket_id: int
    note_added: bool = False
    time_entry_added: bool = False
    status_updated: bool = False
    error: str | None = None
