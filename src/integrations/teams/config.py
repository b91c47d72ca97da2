"""
Configuration for the Teams integration package.

Per-tenant certificate credentials live in Secrets Manager; only
process-wide knobs are read from the environment here.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.integrations.teams.constants import TeamsProvider
from src.utils.logger import logger


class TeamsSettings(BaseSettings):
    """Configuration for the Teams directory integration."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="TEAMS_"
    )

    provider: TeamsProvider = Field(
        default=TeamsProvider.POWERSHELL, description="Teams directory provider to use"
    )
    pwsh_path: str = Field(default="pwsh", description="PowerShell 7 executable")
    script_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description=(
            "Time limit for directory scripts; calls made during reconciliation "
            "or bulk assignment are also bounded by REMOTE_CALL_TIMEOUT_SECONDS, "
            "and the shorter limit applies"
        ),
    )
    connection_test_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Time limit for the connection test script"
    )
    session_idle_minutes: int = Field(
        default=30, gt=0, description="Interactive sessions idle longer are closed"
    )


_teams_settings: TeamsSettings | None = None


def get_teams_settings() -> TeamsSettings:
    """
    Get the global Teams settings instance.

    Returns:
        TeamsSettings: The global settings instance
    """
    global _teams_settings
    if _teams_settings is None:
        _teams_settings = TeamsSettings()
        logger.info("TeamsSettings loaded", provider=_teams_settings.provider.value)
    return _teams_settings


def set_teams_settings(settings: TeamsSettings) -> None:
    """
    Set the global Teams settings instance.

    Args:
        settings: The settings to set
    """
    global _teams_settings
    _teams_settings = settings
