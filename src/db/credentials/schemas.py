"""
Pydantic schemas for tenant credentials.

Each integration declares which of its fields are secret. Secret fields are
accepted on write, stored in Secrets Manager and never returned by the API.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field, SecretStr


class CredentialKind(str, Enum):
    POWERSHELL = "powershell"
    CONNECTWISE = "connectwise"
    THREECX = "threecx"


class CredentialsInput(BaseModel):
    """Base for write schemas; secret fields may be omitted on update."""

    secret_fields: ClassVar[tuple[str, ...]] = ()

    def public_settings(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude=set(self.secret_fields))

    def secret_values(self) -> dict[str, str]:
        values = {}
        for name in self.secret_fields:
            secret: SecretStr | None = getattr(self, name)
            if secret is not None:
                values[name] = secret.get_secret_value()
        return values


class PowerShellCredentialsInput(CredentialsInput):
    """Certificate-based app registration used to run Teams cmdlets."""

    secret_fields: ClassVar[tuple[str, ...]] = ("certificate_thumbprint",)

    app_id: str = Field(..., min_length=1, description="Entra app registration ID")
    certificate_thumbprint: SecretStr | None = Field(
        None, description="Thumbprint of the installed certificate"
    )


class ConnectWiseCredentialsInput(CredentialsInput):
    secret_fields: ClassVar[tuple[str, ...]] = ("private_key",)

    base_url: str = Field(..., min_length=1, description="e.g. https://na.myconnectwise.net")
    company_id: str = Field(..., min_length=1)
    public_key: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1, description="ConnectWise developer client ID")
    private_key: SecretStr | None = None
    default_time_minutes: int = Field(default=15, ge=0)
    auto_update_status: bool = False
    default_status_id: int | None = Field(
        None, description="Status applied to tickets when auto update is on"
    )


class ThreeCXCredentialsInput(CredentialsInput):
    secret_fields: ClassVar[tuple[str, ...]] = ("password",)

    server_url: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: SecretStr | None = None
    mfa_enabled: bool = False


INPUT_SCHEMAS: dict[CredentialKind, type[CredentialsInput]] = {
    CredentialKind.POWERSHELL: PowerShellCredentialsInput,
    CredentialKind.CONNECTWISE: ConnectWiseCredentialsInput,
    CredentialKind.THREECX: ThreeCXCredentialsInput,
}


class TenantCredentialsResponse(BaseModel):
    """Credentials metadata; secret values are never included."""

    id: str
    tenant_id: str
    kind: CredentialKind
    settings: dict[str, Any] = Field(..., description="Non-secret settings")
    has_secret: bool = Field(..., description="Whether secret fields are stored")
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: Any) -> "TenantCredentialsResponse":
        return cls(
            id=record.id,
            tenant_id=record.tenant_id,
            kind=record.kind,
            settings=dict(record.settings or {}),
            has_secret=bool(record.secret_arn),
            is_active=record.is_active,
            created_by=record.created_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ConnectionTestResult(BaseModel):
    success: bool
    message: str


# Resolved credentials for internal use only; never returned by an endpoint


class PowerShellCertificateCredentials(BaseModel):
    app_id: str
    certificate_thumbprint: str
    azure_tenant_id: str


class ConnectWiseCredentials(BaseModel):
    base_url: str
    company_id: str
    public_key: str
    private_key: str
    client_id: str
    default_time_minutes: int = 15
    auto_update_status: bool = False
    default_status_id: int | None = None


class ThreeCXCredentials(BaseModel):
    server_url: str
    username: str
    password: str
    mfa_enabled: bool = False
