"""
Teams directory provider factory for dependency injection.

The PowerShell provider is built per request around a credentials loader; the
mock provider keeps state, so one instance is shared process-wide.
"""

from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.config import get_teams_settings
from src.integrations.teams.constants import TeamsProvider
from src.integrations.teams.providers.mock import MockTeamsDirectory
from src.integrations.teams.providers.powershell import (
    CredentialsLoader,
    PowerShellTeamsDirectory,
)
from src.utils.logger import logger

# Global provider override (tests, mock mode)
_teams_directory: TeamsDirectory | None = None


def create_teams_directory(credentials_loader: CredentialsLoader) -> TeamsDirectory:
    """
    Create a Teams directory provider based on configuration.

    Args:
        credentials_loader: Resolves tenant ids to certificate credentials

    Returns:
        TeamsDirectory: The configured provider

    Raises:
        ValueError: If the configured provider is not supported
    """
    global _teams_directory
    if _teams_directory is not None:
        return _teams_directory

    settings = get_teams_settings()
    if settings.provider == TeamsProvider.POWERSHELL:
        return PowerShellTeamsDirectory(credentials_loader, settings)
    elif settings.provider == TeamsProvider.MOCK:
        logger.info("Creating mock Teams directory provider")
        _teams_directory = MockTeamsDirectory()
        return _teams_directory
    else:
        raise ValueError(f"Unsupported Teams provider: {settings.provider}")


def set_teams_directory(directory: TeamsDirectory | None) -> None:
    """
    Set (or clear) the global Teams directory provider.

    Args:
        directory: The provider to use for every request, or None
    """
    global _teams_directory
    _teams_directory = directory
