"""Tenant integration credentials management module."""

from src.integrations.creds.service import (
    TenantCredentialsService,
    get_secrets_manager_client,
)

__all__ = ["TenantCredentialsService", "get_secrets_manager_client"]
