"""Errors raised by the reconciliation and bulk assignment workflows."""

from typing import Any


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class WorkflowValidationError(WorkflowError):
    """Input rejected locally before any remote call."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message, error_code)


class BulkValidationError(WorkflowValidationError):
    """One or more assignments in a batch failed validation."""

    def __init__(self, invalid_count: int, results: list[Any]):
        noun = "entry" if invalid_count == 1 else "entries"
        super().__init__(f"{invalid_count} invalid phone number {noun} in batch")
        self.invalid_count = invalid_count
        self.results = results


class RemoteCallError(WorkflowError):
    """A directory or inventory call failed."""

    def __init__(self, message: str, error_code: str = "REMOTE_ERROR"):
        super().__init__(message, error_code)


class RemoteTimeoutError(RemoteCallError):
    """A directory or inventory call exceeded its time budget."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"{operation} timed out after {timeout_seconds:g}s", error_code="TIMEOUT"
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class SyncInProgressError(WorkflowError):
    """A sync or commit is already running for the tenant."""

    def __init__(self, tenant_id: str, state: str):
        super().__init__(
            f"A {state} operation is already in progress for tenant {tenant_id}",
            error_code="SYNC_IN_PROGRESS",
        )


class InvalidSyncStateError(WorkflowError):
    """The requested transition is not allowed from the current state."""

    def __init__(self, action: str, state: str):
        super().__init__(
            f"Cannot {action} while sync is {state}", error_code="INVALID_STATE"
        )
