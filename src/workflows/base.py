"""
Collaborator interfaces consumed by the reconciliation workflows.

The workflows only talk to these abstractions; concrete directory providers
live under ``src.integrations.teams`` and the database-backed inventory under
``src.db.phone_numbers``.
"""

from abc import ABC, abstractmethod

from src.workflows.schemas import (
    ApplyResult,
    AssignmentRequest,
    AssignmentResult,
    Change,
    PhoneNumberRecord,
    RoutingPolicy,
)


class RemoteDirectory(ABC):
    """The authoritative directory of voice assignments (Microsoft Teams)."""

    @abstractmethod
    async def fetch_remote_directory(self, tenant_id: str) -> list[PhoneNumberRecord]:
        """
        List every user or resource account with a line URI.

        Raises:
            TeamsError: If the directory cannot be queried
        """
        pass

    @abstractmethod
    async def fetch_routing_policies(self, tenant_id: str) -> list[RoutingPolicy]:
        """List assignable online voice routing policies."""
        pass

    @abstractmethod
    async def submit_bulk_assignment(
        self, tenant_id: str, assignments: list[AssignmentRequest]
    ) -> list[AssignmentResult]:
        """
        Assign numbers and routing policies in one remote operation.

        The returned list may be shorter than the request or in a different
        order; callers match results by user id.
        """
        pass


class LocalInventory(ABC):
    """The local, persisted phone number inventory."""

    @abstractmethod
    async def fetch_local_inventory(
        self, tenant_id: str, filters: dict[str, str] | None = None
    ) -> list[PhoneNumberRecord]:
        pass

    @abstractmethod
    async def apply_selected_changes(
        self, tenant_id: str, changes: list[Change]
    ) -> ApplyResult:
        """
        Write approved adds and updates.

        Per-item failures are reported in ``ApplyResult.errors``; an exception
        means nothing should be assumed committed.
        """
        pass
