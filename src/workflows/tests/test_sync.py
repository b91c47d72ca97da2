"""Tests for the Teams sync state machine."""

import asyncio

import pytest

from src.workflows.exceptions import (
    InvalidSyncStateError,
    RemoteCallError,
    RemoteTimeoutError,
    SyncInProgressError,
    WorkflowValidationError,
)
from src.workflows.sync import (
    NotificationLevel,
    SyncOrchestrator,
    SyncRegistry,
    SyncState,
)
from src.workflows.tests.fakes import FakeDirectory, FakeInventory, record

TENANT = "tenant-1"


@pytest.fixture
def orchestrator():
    return SyncOrchestrator(TENANT, timeout_seconds=1.0)


@pytest.fixture
def directory():
    return FakeDirectory(
        [
            record("tel:+15550000001", name="Alice"),
            record("tel:+15550000002", name="Bob", policy="US-National"),
            record("tel:+15550000003", name="Carol"),
        ]
    )


@pytest.fixture
def inventory():
    return FakeInventory(
        [
            record("tel:+15550000002", name="Bob", policy="US-Local", local_id="l2"),
            record("tel:+15550000003", name="Carol", local_id="l3"),
        ]
    )


class TestSync:
    @pytest.mark.asyncio
    async def test_changes_move_to_commit_pending_with_all_selected(
        self, orchestrator, directory, inventory
    ):
        snapshot = await orchestrator.sync(directory, inventory)

        assert snapshot.state == SyncState.COMMIT_PENDING
        assert snapshot.selected_to_add == ["tel:+15550000001"]
        assert snapshot.selected_to_update == ["tel:+15550000002"]
        assert snapshot.diff.summary.unchanged == 1
        assert snapshot.local_total == 2
        assert snapshot.notification.level == NotificationLevel.INFO

    @pytest.mark.asyncio
    async def test_no_changes_returns_to_idle(self, orchestrator):
        records = [record("tel:+15550000001", name="Alice")]

        snapshot = await orchestrator.sync(
            FakeDirectory(records), FakeInventory(records)
        )

        assert snapshot.state == SyncState.IDLE
        assert snapshot.notification.title == "Up to date"
        assert snapshot.diff.summary.unchanged == 1

    @pytest.mark.asyncio
    async def test_fetch_failure_restores_previous_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        directory.error = RuntimeError("Connect-MicrosoftTeams failed")

        with pytest.raises(RemoteCallError) as exc_info:
            await orchestrator.sync(directory, inventory)

        assert "Connect-MicrosoftTeams failed" in exc_info.value.message
        snapshot = orchestrator.snapshot()
        assert snapshot.state == SyncState.COMMIT_PENDING
        assert snapshot.selected_to_add == ["tel:+15550000001"]
        assert snapshot.notification.level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_fetch_timeout(self, inventory):
        orchestrator = SyncOrchestrator(TENANT, timeout_seconds=0.01)

        with pytest.raises(RemoteTimeoutError):
            await orchestrator.sync(FakeDirectory(delay=1), inventory)

        assert orchestrator.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_concurrent_sync_is_rejected(self, orchestrator, inventory):
        directory = FakeDirectory([record("tel:+15550000001")])
        directory.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()

        with pytest.raises(SyncInProgressError):
            await orchestrator.sync(directory, inventory)

        directory.gate.set()
        snapshot = await task
        assert snapshot.state == SyncState.COMMIT_PENDING

    @pytest.mark.asyncio
    async def test_dismissed_in_flight_sync_is_discarded(
        self, orchestrator, inventory
    ):
        directory = FakeDirectory([record("tel:+15550000001")])
        directory.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()

        dismissed = orchestrator.dismiss()
        assert dismissed.state == SyncState.SYNCING
        assert dismissed.discarding is True

        directory.gate.set()
        snapshot = await task
        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff is None

    @pytest.mark.asyncio
    async def test_dismissing_resync_drops_earlier_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        directory.gate = asyncio.Event()
        directory.started.clear()
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()

        dismissed = orchestrator.dismiss()
        assert dismissed.diff is None
        assert dismissed.selected_to_add == []

        directory.gate.set()
        snapshot = await task
        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff is None
        assert snapshot.selected_to_add == []
        assert snapshot.selected_to_update == []

    @pytest.mark.asyncio
    async def test_dismissed_resync_failure_drops_earlier_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        directory.gate = asyncio.Event()
        directory.started.clear()
        directory.error = RuntimeError("Teams unavailable")
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()
        orchestrator.dismiss()

        directory.gate.set()
        snapshot = await task
        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff is None

    @pytest.mark.asyncio
    async def test_cancelled_sync_releases_tenant(self, orchestrator, inventory):
        directory = FakeDirectory([record("tel:+15550000001")])
        directory.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert orchestrator.state == SyncState.IDLE
        directory.gate.set()
        snapshot = await orchestrator.sync(directory, inventory)
        assert snapshot.state == SyncState.COMMIT_PENDING

    @pytest.mark.asyncio
    async def test_cancelled_resync_restores_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        directory.gate = asyncio.Event()
        directory.started.clear()
        task = asyncio.create_task(orchestrator.sync(directory, inventory))
        await directory.started.wait()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        snapshot = orchestrator.snapshot()
        assert snapshot.state == SyncState.COMMIT_PENDING
        assert snapshot.selected_to_add == ["tel:+15550000001"]


class TestSelection:
    @pytest.mark.asyncio
    async def test_select_replaces_only_given_list(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)

        snapshot = orchestrator.select(to_add=[])

        assert snapshot.selected_to_add == []
        assert snapshot.selected_to_update == ["tel:+15550000002"]

    @pytest.mark.asyncio
    async def test_unknown_line_uri_is_rejected(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)

        with pytest.raises(WorkflowValidationError):
            orchestrator.select(to_update=["tel:+15550000001"])

    def test_select_requires_pending_review(self, orchestrator):
        with pytest.raises(InvalidSyncStateError):
            orchestrator.select(to_add=[])


class TestCommit:
    @pytest.mark.asyncio
    async def test_commit_applies_only_selected_changes(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        orchestrator.select(to_update=[])

        snapshot = await orchestrator.commit(inventory)

        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff is None
        assert snapshot.last_result.added == 1
        assert snapshot.last_result.updated == 0
        assert [c.line_uri for c in inventory.applied] == ["tel:+15550000001"]
        assert snapshot.local_total == 3
        assert snapshot.notification.level == NotificationLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_update_carries_local_id(self, orchestrator, directory, inventory):
        await orchestrator.sync(directory, inventory)
        orchestrator.select(to_add=[])

        await orchestrator.commit(inventory)

        assert inventory.applied[0].local_id == "l2"
        assert inventory.applied[0].record.policy == "US-National"

    @pytest.mark.asyncio
    async def test_per_item_errors_are_reported(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        inventory.failing_uris = {"tel:+15550000001"}

        snapshot = await orchestrator.commit(inventory)

        assert snapshot.last_result.updated == 1
        assert snapshot.last_result.errors[0].line_uri == "tel:+15550000001"
        assert snapshot.notification.level == NotificationLevel.WARNING

    @pytest.mark.asyncio
    async def test_failed_commit_keeps_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        inventory.apply_error = RuntimeError("database unavailable")

        with pytest.raises(RemoteCallError):
            await orchestrator.commit(inventory)

        snapshot = orchestrator.snapshot()
        assert snapshot.state == SyncState.COMMIT_PENDING
        assert snapshot.selected_to_add == ["tel:+15550000001"]

    @pytest.mark.asyncio
    async def test_hook_runs_before_review_closes(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        seen = []

        async def on_applied(result):
            seen.append((result.added, result.updated, orchestrator.state))

        snapshot = await orchestrator.commit(inventory, on_applied=on_applied)

        assert seen == [(1, 1, SyncState.COMMITTING)]
        assert snapshot.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_failed_persist_keeps_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)

        async def on_applied(result):
            raise RuntimeError("audit write failed")

        with pytest.raises(RuntimeError):
            await orchestrator.commit(inventory, on_applied=on_applied)

        snapshot = orchestrator.snapshot()
        assert snapshot.state == SyncState.COMMIT_PENDING
        assert snapshot.selected_to_add == ["tel:+15550000001"]
        assert snapshot.selected_to_update == ["tel:+15550000002"]
        assert snapshot.last_result is None
        assert snapshot.notification.level == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_cancelled_commit_keeps_review(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        gate = asyncio.Event()
        entered = asyncio.Event()

        async def on_applied(result):
            entered.set()
            await gate.wait()

        task = asyncio.create_task(
            orchestrator.commit(inventory, on_applied=on_applied)
        )
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert orchestrator.state == SyncState.COMMIT_PENDING
        snapshot = await orchestrator.commit(inventory)
        assert snapshot.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_resync_after_full_commit_is_clean(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        await orchestrator.commit(inventory)

        snapshot = await orchestrator.sync(directory, inventory)

        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff.to_add == []
        assert snapshot.diff.to_update == []
        assert snapshot.diff.summary.unchanged == 3

    @pytest.mark.asyncio
    async def test_empty_selection_is_rejected(
        self, orchestrator, directory, inventory
    ):
        await orchestrator.sync(directory, inventory)
        orchestrator.select(to_add=[], to_update=[])

        with pytest.raises(WorkflowValidationError):
            await orchestrator.commit(inventory)

    @pytest.mark.asyncio
    async def test_commit_without_review(self, orchestrator, inventory):
        with pytest.raises(InvalidSyncStateError):
            await orchestrator.commit(inventory)


class TestDismiss:
    @pytest.mark.asyncio
    async def test_dismiss_clears_review(self, orchestrator, directory, inventory):
        await orchestrator.sync(directory, inventory)

        snapshot = orchestrator.dismiss()

        assert snapshot.state == SyncState.IDLE
        assert snapshot.diff is None
        assert snapshot.selected_to_add == []
        assert snapshot.notification is None


class TestSyncRegistry:
    def test_one_orchestrator_per_tenant(self):
        registry = SyncRegistry(timeout_seconds=5)

        first = registry.get("a")

        assert registry.get("a") is first
        assert registry.get("b") is not first
        assert first.timeout_seconds == 5

    def test_discard_forgets_state(self):
        registry = SyncRegistry(timeout_seconds=5)
        first = registry.get("a")

        registry.discard("a")
        registry.discard("missing")

        assert registry.get("a") is not first
