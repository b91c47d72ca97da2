"""FastAPI dependencies for the Teams integration."""

from fastapi import Depends

from src.integrations.creds.dependencies import get_creds_service
from src.integrations.creds.service import TenantCredentialsService
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.providers.factory import create_teams_directory


async def get_teams_directory(
    creds_service: TenantCredentialsService = Depends(get_creds_service),
) -> TeamsDirectory:
    """
    Get a Teams directory provider bound to the request's credentials service.

    Args:
        creds_service: Tenant credentials service

    Returns:
        TeamsDirectory instance
    """
    return create_teams_directory(creds_service.get_powershell_credentials)
