"""
Abstract interface for Teams directory providers.

Extends the workflow ``RemoteDirectory`` with the admin operations the API
exposes directly: policy listing and a connection check.
"""

from abc import abstractmethod

from src.db.credentials.schemas import ConnectionTestResult
from src.integrations.teams.constants import PolicyType
from src.integrations.teams.schemas import TeamsPolicy
from src.workflows.base import RemoteDirectory


class TeamsDirectory(RemoteDirectory):
    """Microsoft Teams voice directory for one or more customer tenants."""

    @abstractmethod
    async def fetch_policies(
        self, tenant_id: str, policy_type: PolicyType
    ) -> list[TeamsPolicy]:
        """
        List policy instances of one type.

        Args:
            tenant_id: Tenant record UUID
            policy_type: Which policy family to list

        Raises:
            TeamsError: If the policies cannot be listed
        """
        pass

    @abstractmethod
    async def test_connection(self, tenant_id: str) -> ConnectionTestResult:
        """Sign in with the tenant's credentials and report the outcome."""
        pass
