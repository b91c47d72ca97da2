"""Configuration for tenant credential storage."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CredentialsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="CREDENTIALS_"
    )

    secret_prefix: str = Field(
        default="voice-manager", description="Leading path of Secrets Manager names"
    )
    cache_ttl_seconds: int = Field(
        default=300, gt=0, description="How long decrypted credentials stay cached"
    )
    cache_max_size: int = Field(default=1000, gt=0)


_credentials_settings: CredentialsSettings | None = None


def get_credentials_settings() -> CredentialsSettings:
    global _credentials_settings
    if _credentials_settings is None:
        _credentials_settings = CredentialsSettings()
    return _credentials_settings


def set_credentials_settings(settings: CredentialsSettings) -> None:
    global _credentials_settings
    _credentials_settings = settings
