"""
Mock Teams directory provider for demos and local development.

Keeps an in-memory directory per tenant. Bulk assignments mutate it, so a
subsequent sync shows the new assignments.
"""

from src.db.credentials.schemas import ConnectionTestResult
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.constants import PolicyType
from src.integrations.teams.providers.mock_data import MOCK_DIRECTORY, MOCK_POLICIES
from src.integrations.teams.schemas import TeamsPolicy
from src.utils.logger import logger
from src.workflows.schemas import (
    AssignmentRequest,
    AssignmentResult,
    PhoneNumberRecord,
    RoutingPolicy,
)


class MockTeamsDirectory(TeamsDirectory):
    """Teams directory implementation using in-memory data."""

    def __init__(
        self,
        directory: list[PhoneNumberRecord] | None = None,
        failing_user_ids: set[str] | None = None,
    ):
        """
        Args:
            directory: Seed records for every tenant (defaults to demo data)
            failing_user_ids: Users whose assignment is reported as failed
        """
        self._seed = list(MOCK_DIRECTORY if directory is None else directory)
        self._directories: dict[str, list[PhoneNumberRecord]] = {}
        self.failing_user_ids = failing_user_ids or set()

    def _directory(self, tenant_id: str) -> list[PhoneNumberRecord]:
        if tenant_id not in self._directories:
            self._directories[tenant_id] = [r.model_copy() for r in self._seed]
        return self._directories[tenant_id]

    async def fetch_remote_directory(self, tenant_id: str) -> list[PhoneNumberRecord]:
        return [r.model_copy() for r in self._directory(tenant_id)]

    async def fetch_policies(
        self, tenant_id: str, policy_type: PolicyType
    ) -> list[TeamsPolicy]:
        default = [TeamsPolicy(identity="Global", name="Global")]
        return list(MOCK_POLICIES.get(policy_type, default))

    async def fetch_routing_policies(self, tenant_id: str) -> list[RoutingPolicy]:
        policies = await self.fetch_policies(tenant_id, PolicyType.VOICE_ROUTING)
        return [
            RoutingPolicy(id=p.identity, name=p.name, description=p.description)
            for p in policies
        ]

    async def submit_bulk_assignment(
        self, tenant_id: str, assignments: list[AssignmentRequest]
    ) -> list[AssignmentResult]:
        directory = self._directory(tenant_id)
        results = []
        for assignment in assignments:
            if assignment.user_id in self.failing_user_ids:
                results.append(
                    AssignmentResult(
                        user_id=assignment.user_id,
                        user_name=assignment.user_name,
                        success=False,
                        error="Phone number assignment failed: user is not voice enabled",
                    )
                )
                continue

            directory[:] = [
                r
                for r in directory
                if r.user_principal_name != assignment.user_id
                and r.line_uri != assignment.phone_number
            ]
            directory.append(
                PhoneNumberRecord(
                    line_uri=assignment.phone_number,
                    display_name=assignment.user_name,
                    user_principal_name=assignment.user_id,
                    policy=assignment.routing_policy,
                )
            )
            results.append(
                AssignmentResult(
                    user_id=assignment.user_id,
                    user_name=assignment.user_name,
                    success=True,
                )
            )

        logger.info(
            "Mock bulk assignment applied", tenant_id=tenant_id, count=len(results)
        )
        return results

    async def test_connection(self, tenant_id: str) -> ConnectionTestResult:
        return ConnectionTestResult(success=True, message="Connected to mock Teams tenant")
