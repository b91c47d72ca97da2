"""
Auth-specific Pydantic schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.auth.constants import Role


class User(BaseModel):
    """Authenticated operator."""

    id: str = Field(..., description="Operator's unique identifier (Cognito sub)")
    email: str = Field(..., description="Operator's email address")
    name: str | None = Field(
        None, min_length=1, max_length=128, description="Operator's full name"
    )
    role: Role = Field(default=Role.OPERATOR, description="Operator's role")

    @property
    def display_name(self) -> str:
        return self.name or self.email


class Session(BaseModel):
    """Operator session information."""

    user: User | None = Field(None, description="User information")
    access_token: str = Field(..., description="Access token")
    expires_at: datetime = Field(..., description="Token expiration timestamp")
