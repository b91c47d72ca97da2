"""In-memory collaborators for workflow tests."""

import asyncio

from src.workflows.base import LocalInventory, RemoteDirectory
from src.workflows.schemas import (
    ApplyResult,
    AssignmentRequest,
    AssignmentResult,
    Change,
    ChangeAction,
    ChangeError,
    PhoneNumberRecord,
    RoutingPolicy,
)


class FakeDirectory(RemoteDirectory):
    def __init__(
        self,
        records: list[PhoneNumberRecord] | None = None,
        error: Exception | None = None,
        delay: float = 0,
        results: list[AssignmentResult] | None = None,
    ):
        self.records = records or []
        self.error = error
        self.delay = delay
        self.results = results
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()
        self.submitted: list[list[AssignmentRequest]] = []

    async def fetch_remote_directory(self, tenant_id: str) -> list[PhoneNumberRecord]:
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def fetch_routing_policies(self, tenant_id: str) -> list[RoutingPolicy]:
        return [RoutingPolicy(id="Tag:US-National", name="US-National")]

    async def submit_bulk_assignment(
        self, tenant_id: str, assignments: list[AssignmentRequest]
    ) -> list[AssignmentResult]:
        self.submitted.append(assignments)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.results is not None:
            return self.results
        return [
            AssignmentResult(user_id=a.user_id, success=True) for a in assignments
        ]


class FakeInventory(LocalInventory):
    def __init__(
        self,
        records: list[PhoneNumberRecord] | None = None,
        failing_uris: set[str] | None = None,
        apply_error: Exception | None = None,
    ):
        self.records = {r.line_uri: r for r in records or []}
        self.failing_uris = failing_uris or set()
        self.apply_error = apply_error
        self.applied: list[Change] = []

    async def fetch_local_inventory(
        self, tenant_id: str, filters: dict[str, str] | None = None
    ) -> list[PhoneNumberRecord]:
        return list(self.records.values())

    async def apply_selected_changes(
        self, tenant_id: str, changes: list[Change]
    ) -> ApplyResult:
        if self.apply_error is not None:
            raise self.apply_error
        result = ApplyResult()
        for change in changes:
            if change.line_uri in self.failing_uris:
                result.errors.append(
                    ChangeError(line_uri=change.line_uri, error="constraint violated")
                )
                continue
            self.applied.append(change)
            self.records[change.line_uri] = change.record
            if change.action == ChangeAction.ADD:
                result.added += 1
            else:
                result.updated += 1
        return result


def record(
    uri: str,
    name: str | None = None,
    upn: str | None = None,
    policy: str | None = None,
    local_id: str | None = None,
) -> PhoneNumberRecord:
    return PhoneNumberRecord(
        line_uri=uri,
        display_name=name,
        user_principal_name=upn,
        policy=policy,
        local_id=local_id,
    )
