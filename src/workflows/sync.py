"""
Teams directory reconciliation state machine.

One ``SyncOrchestrator`` exists per tenant. It fetches the directory and the
local inventory, classifies the difference and, once an operator confirms a
selection, writes only the selected changes to the inventory.

    idle -> syncing -> commit_pending -> committing -> idle
                    `-> idle (nothing to change)
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from src.config import get_app_settings
from src.utils.logger import logger
from src.workflows.base import LocalInventory, RemoteDirectory
from src.workflows.diff import classify
from src.workflows.exceptions import (
    InvalidSyncStateError,
    RemoteCallError,
    RemoteTimeoutError,
    SyncInProgressError,
    WorkflowError,
    WorkflowValidationError,
)
from src.workflows.schemas import (
    ApplyResult,
    Change,
    ChangeAction,
    DiffResult,
    PhoneNumberRecord,
)

T = TypeVar("T")


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    COMMIT_PENDING = "commit_pending"
    COMMITTING = "committing"


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    title: str
    message: str


class SyncSnapshot(BaseModel):
    """Everything the operator UI needs to render the sync workflow."""

    tenant_id: str
    state: SyncState
    diff: DiffResult | None = None
    selected_to_add: list[str] = Field(default_factory=list)
    selected_to_update: list[str] = Field(default_factory=list)
    discarding: bool = Field(
        default=False,
        description="The in-flight sync was dismissed and its result will be dropped",
    )
    local_total: int | None = Field(
        None, description="Size of the most recent local inventory snapshot"
    )
    last_result: ApplyResult | None = None
    notification: Notification | None = None


class SyncOrchestrator:
    """Per-tenant fetch, classify, select and commit cycle."""

    def __init__(self, tenant_id: str, timeout_seconds: float = 45.0):
        self.tenant_id = tenant_id
        self.timeout_seconds = timeout_seconds
        self._state = SyncState.IDLE
        self._diff: DiffResult | None = None
        self._selected_add: set[str] = set()
        self._selected_update: set[str] = set()
        self._local_snapshot: list[PhoneNumberRecord] | None = None
        self._last_result: ApplyResult | None = None
        self._notification: Notification | None = None
        # Bumped on every sync start and on dismiss; a finishing sync whose
        # generation no longer matches has been dismissed
        self._generation = 0
        self._in_flight_generation = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def diff(self) -> DiffResult | None:
        return self._diff

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            tenant_id=self.tenant_id,
            state=self._state,
            diff=self._diff,
            selected_to_add=sorted(self._selected_add),
            selected_to_update=sorted(self._selected_update),
            discarding=self._state == SyncState.SYNCING
            and self._in_flight_generation != self._generation,
            local_total=(
                len(self._local_snapshot) if self._local_snapshot is not None else None
            ),
            last_result=self._last_result,
            notification=self._notification,
        )

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise RemoteTimeoutError(operation, self.timeout_seconds) from e
        except WorkflowError:
            raise
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or type(e).__name__
            raise RemoteCallError(f"{operation} failed: {message}") from e

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        self._notification = Notification(level=level, title=title, message=message)

    def _clear_review(self) -> None:
        self._diff = None
        self._selected_add = set()
        self._selected_update = set()

    def _end_sync(self, generation: int, previous: tuple) -> bool:
        """
        Leave ``syncing`` without a new diff.

        A dismissed sync drops the review; otherwise the state from before the
        sync comes back. Returns True if the sync had been dismissed.
        """
        if generation != self._generation:
            self._state = SyncState.IDLE
            self._clear_review()
            return True
        (
            self._state,
            self._diff,
            self._selected_add,
            self._selected_update,
        ) = previous
        return False

    async def sync(
        self, directory: RemoteDirectory, inventory: LocalInventory
    ) -> SyncSnapshot:
        """
        Fetch both snapshots and classify them.

        Raises:
            SyncInProgressError: If a sync or commit is already running
            RemoteTimeoutError: If a fetch exceeds the timeout
            RemoteCallError: If a fetch fails
        """
        if self._state in (SyncState.SYNCING, SyncState.COMMITTING):
            raise SyncInProgressError(self.tenant_id, self._state.value)

        previous = (
            self._state,
            self._diff,
            set(self._selected_add),
            set(self._selected_update),
        )
        self._state = SyncState.SYNCING
        self._generation += 1
        generation = self._generation
        self._in_flight_generation = generation
        logger.info("Teams sync started", tenant_id=self.tenant_id)

        try:
            remote = await self._call(
                "Teams directory fetch",
                directory.fetch_remote_directory(self.tenant_id),
            )
            local = await self._call(
                "Local inventory fetch",
                inventory.fetch_local_inventory(self.tenant_id),
            )
        except RemoteCallError as e:
            if self._end_sync(generation, previous):
                logger.warning(
                    "Dismissed Teams sync failed",
                    tenant_id=self.tenant_id,
                    error=e.message,
                )
                return self.snapshot()
            self._notify(NotificationLevel.ERROR, "Sync failed", e.message)
            logger.error(
                "Teams sync failed",
                tenant_id=self.tenant_id,
                error=e.message,
                error_code=e.error_code,
            )
            raise
        except BaseException:
            self._end_sync(generation, previous)
            logger.warning("Teams sync interrupted", tenant_id=self.tenant_id)
            raise

        if generation != self._generation:
            logger.info("Discarding dismissed Teams sync", tenant_id=self.tenant_id)
            self._end_sync(generation, previous)
            return self.snapshot()

        diff = classify(remote, local)
        self._local_snapshot = local
        self._diff = diff
        summary = diff.summary

        if not diff.has_changes:
            self._state = SyncState.IDLE
            self._selected_add = set()
            self._selected_update = set()
            self._notify(
                NotificationLevel.INFO,
                "Up to date",
                f"All {summary.teams_total} Teams numbers match the local inventory",
            )
        else:
            self._state = SyncState.COMMIT_PENDING
            self._selected_add = {record.line_uri for record in diff.to_add}
            self._selected_update = {entry.line_uri for entry in diff.to_update}
            self._notify(
                NotificationLevel.INFO,
                "Changes found",
                f"{summary.to_add} to add, {summary.to_update} to update",
            )

        logger.info(
            "Teams sync classified",
            tenant_id=self.tenant_id,
            **summary.model_dump(),
        )
        return self.snapshot()

    def select(
        self,
        to_add: list[str] | None = None,
        to_update: list[str] | None = None,
    ) -> SyncSnapshot:
        """
        Replace the selection for either list; ``None`` leaves it unchanged.

        Raises:
            InvalidSyncStateError: If no review is pending
            WorkflowValidationError: If a line URI is not part of the diff
        """
        if self._state != SyncState.COMMIT_PENDING or self._diff is None:
            raise InvalidSyncStateError("change selection", self._state.value)

        if to_add is not None:
            known = {record.line_uri for record in self._diff.to_add}
            self._selected_add = self._checked_selection(to_add, known)
        if to_update is not None:
            known = {entry.line_uri for entry in self._diff.to_update}
            self._selected_update = self._checked_selection(to_update, known)
        return self.snapshot()

    @staticmethod
    def _checked_selection(selected: list[str], known: set[str]) -> set[str]:
        unknown = sorted(set(selected) - known)
        if unknown:
            raise WorkflowValidationError(
                f"Line URIs not in the pending diff: {', '.join(unknown)}"
            )
        return set(selected)

    def selected_changes(self) -> list[Change]:
        if self._diff is None:
            return []
        changes = [
            Change(action=ChangeAction.ADD, line_uri=record.line_uri, record=record)
            for record in self._diff.to_add
            if record.line_uri in self._selected_add
        ]
        changes.extend(
            Change(
                action=ChangeAction.UPDATE,
                line_uri=entry.line_uri,
                local_id=entry.local_id,
                record=entry.remote,
            )
            for entry in self._diff.to_update
            if entry.line_uri in self._selected_update
        )
        return changes

    async def commit(
        self,
        inventory: LocalInventory,
        on_applied: Callable[[ApplyResult], Awaitable[None]] | None = None,
    ) -> SyncSnapshot:
        """
        Apply the selected changes to the local inventory.

        ``on_applied`` runs after the apply and before the review is closed;
        callers use it to persist the writes. If the apply or the hook fails
        the review stays pending with the selection intact.

        Raises:
            SyncInProgressError: If a sync or commit is already running
            InvalidSyncStateError: If no review is pending
            WorkflowValidationError: If nothing is selected
            RemoteTimeoutError: If the apply exceeds the timeout
            RemoteCallError: If the apply fails
        """
        if self._state in (SyncState.SYNCING, SyncState.COMMITTING):
            raise SyncInProgressError(self.tenant_id, self._state.value)
        if self._state != SyncState.COMMIT_PENDING:
            raise InvalidSyncStateError("commit", self._state.value)

        changes = self.selected_changes()
        if not changes:
            raise WorkflowValidationError("No changes selected")

        self._state = SyncState.COMMITTING
        logger.info(
            "Committing Teams sync", tenant_id=self.tenant_id, changes=len(changes)
        )
        try:
            result = await self._call(
                "Inventory update",
                inventory.apply_selected_changes(self.tenant_id, changes),
            )
            if on_applied is not None:
                await on_applied(result)
        except RemoteCallError as e:
            self._state = SyncState.COMMIT_PENDING
            self._notify(NotificationLevel.ERROR, "Commit failed", e.message)
            logger.error(
                "Teams sync commit failed",
                tenant_id=self.tenant_id,
                error=e.message,
                error_code=e.error_code,
            )
            raise
        except BaseException as e:
            self._state = SyncState.COMMIT_PENDING
            if isinstance(e, Exception):
                self._notify(NotificationLevel.ERROR, "Commit failed", str(e))
            logger.error(
                "Teams sync commit interrupted",
                tenant_id=self.tenant_id,
                error=str(e) or type(e).__name__,
            )
            raise

        self._state = SyncState.IDLE
        self._clear_review()
        self._last_result = result

        level = NotificationLevel.SUCCESS
        title = "Sync complete"
        message = f"Added {result.added}, updated {result.updated}"
        if result.errors:
            level = NotificationLevel.WARNING
            title = "Sync completed with errors"
            message += f", {len(result.errors)} failed"

        try:
            self._local_snapshot = await self._call(
                "Local inventory fetch",
                inventory.fetch_local_inventory(self.tenant_id),
            )
        except RemoteCallError as e:
            logger.warning(
                "Local inventory refresh failed after commit",
                tenant_id=self.tenant_id,
                error=e.message,
            )
            level = NotificationLevel.WARNING
            message += f". Inventory refresh failed: {e.message}"

        self._notify(level, title, message)
        logger.info(
            "Teams sync committed",
            tenant_id=self.tenant_id,
            added=result.added,
            updated=result.updated,
            failed=len(result.errors),
        )
        return self.snapshot()

    def dismiss(self) -> SyncSnapshot:
        """
        Discard the pending review.

        A sync that is still fetching is left to finish and its result is
        dropped. A review that was pending before that sync is dropped now.

        Raises:
            InvalidSyncStateError: While a commit is running
        """
        if self._state == SyncState.COMMITTING:
            raise InvalidSyncStateError("dismiss", self._state.value)

        if self._state == SyncState.SYNCING:
            self._generation += 1
            self._clear_review()
            logger.info("In-flight Teams sync dismissed", tenant_id=self.tenant_id)
            return self.snapshot()

        self._state = SyncState.IDLE
        self._clear_review()
        self._notification = None
        return self.snapshot()


class SyncRegistry:
    """Keeps one orchestrator per tenant."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        self._orchestrators: dict[str, SyncOrchestrator] = {}

    def get(self, tenant_id: str) -> SyncOrchestrator:
        orchestrator = self._orchestrators.get(tenant_id)
        if orchestrator is None:
            orchestrator = SyncOrchestrator(tenant_id, self.timeout_seconds)
            self._orchestrators[tenant_id] = orchestrator
        return orchestrator

    def discard(self, tenant_id: str) -> None:
        self._orchestrators.pop(tenant_id, None)


_sync_registry: SyncRegistry | None = None


def get_sync_registry() -> SyncRegistry:
    """
    Get the process-wide sync registry.

    Returns:
        SyncRegistry: The global registry instance
    """
    global _sync_registry
    if _sync_registry is None:
        _sync_registry = SyncRegistry(get_app_settings().remote_call_timeout_seconds)
    return _sync_registry


def set_sync_registry(registry: SyncRegistry) -> None:
    """
    Set the process-wide sync registry.

    Useful for testing.

    Args:
        registry: The registry to use
    """
    global _sync_registry
    _sync_registry = registry
