"""
FastAPI dependencies for workflow orchestration.

This module composes the Teams directory, the local inventory and the
per-tenant sync state into the workflow objects the router uses.
"""

from fastapi import Depends

from src.config import get_app_settings
from src.db.dependencies import get_tenant
from src.db.tenants.model import CustomerTenant
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.dependencies import get_teams_directory
from src.workflows.bulk import BulkAssignmentExecutor
from src.workflows.sync import SyncOrchestrator, SyncRegistry, get_sync_registry


def get_registry() -> SyncRegistry:
    return get_sync_registry()


def get_sync_orchestrator(
    tenant: CustomerTenant = Depends(get_tenant),
    registry: SyncRegistry = Depends(get_registry),
) -> SyncOrchestrator:
    """
    FastAPI dependency for the tenant's sync orchestrator.

    Args:
        tenant: Active tenant from the path
        registry: Process-wide orchestrator registry

    Returns:
        SyncOrchestrator: The tenant's orchestrator (created on first use)
    """
    return registry.get(tenant.id)


def get_bulk_executor(
    directory: TeamsDirectory = Depends(get_teams_directory),
) -> BulkAssignmentExecutor:
    return BulkAssignmentExecutor(
        directory, get_app_settings().remote_call_timeout_seconds
    )
