from fastapi import Depends

from src.integrations.connectwise.service import ConnectWiseService
from src.integrations.creds.dependencies import get_creds_service
from src.integrations.creds.service import TenantCredentialsService


async def get_connectwise_service(
    creds_service: TenantCredentialsService = Depends(get_creds_service),
) -> ConnectWiseService:
    return ConnectWiseService(creds_service)
