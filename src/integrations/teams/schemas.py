"""Pydantic schemas for the Teams integration."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from src.integrations.teams.constants import PolicyType


class ScriptResult(BaseModel):
    """Outcome of one PowerShell invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class TeamsPolicy(BaseModel):
    """A policy instance of any supported type."""

    identity: str = Field(..., description="Full identity, e.g. 'Tag:US-East'")
    name: str = Field(..., description="Identity without the 'Tag:' prefix")
    description: str | None = None


class PolicyListResponse(BaseModel):
    policy_type: PolicyType
    display_name: str
    policies: list[TeamsPolicy]


class SessionEvent(BaseModel):
    """One event from an interactive PowerShell session."""

    output: str | None = None
    error: str | None = None
    message: str | None = None


class SSEEvent(BaseModel):
    """Server-Sent Event wrapper for type-safe SSE formatting."""

    data: str
    event: Literal["session", "state", "heartbeat", "done"] | None = None

    def format(self) -> str:
        """Format as SSE protocol string with trailing blank line."""
        lines = []
        if self.event:
            lines.append(f"event: {self.event}")
        for line in self.data.split("\n"):
            lines.append(f"data: {line}")
        return "\n".join(lines) + "\n\n"


class MfaCodeRequest(BaseModel):
    code: str = Field(..., min_length=4, max_length=10, pattern=r"^\d+$")


class SessionState(str, Enum):
    CONNECTING = "connecting"
    AWAITING_MFA = "awaiting_mfa"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class SessionInfo(BaseModel):
    operator_id: str
    tenant_id: str
    state: SessionState
    created_at: datetime
    last_activity: datetime
