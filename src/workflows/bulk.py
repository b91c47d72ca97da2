"""
Bulk phone number and routing policy assignment.

The whole batch is validated locally first; a single invalid number rejects
the batch before anything is sent. Valid batches go to the directory as one
operation and results are matched back to requests by user id.

Progress callbacks are estimates derived from the phase of the operation. The
directory reports nothing until the whole batch finishes, so a percentage
shown to an operator says nothing about how many users have been assigned.
"""

import asyncio
from collections import defaultdict, deque
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, Field

from src.utils.logger import logger
from src.workflows.base import RemoteDirectory
from src.workflows.exceptions import (
    BulkValidationError,
    RemoteCallError,
    RemoteTimeoutError,
    WorkflowValidationError,
)
from src.workflows.schemas import AssignmentRequest, AssignmentResult
from src.workflows.validation import TEL_PREFIX, validate_line_uri

INDETERMINATE_ERROR = "No result returned by Teams for this user; verify the assignment"


class BulkPhase(str, Enum):
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


class BulkProgress(BaseModel):
    phase: BulkPhase
    total: int
    percent: int = Field(..., ge=0, le=100)
    estimated: bool = Field(
        default=True, description="Always true: percent is not per-item progress"
    )


_PHASE_PERCENT = {
    BulkPhase.VALIDATED: 10,
    BulkPhase.SUBMITTED: 50,
    BulkPhase.COMPLETED: 100,
}

ProgressCallback = Callable[[BulkProgress], None]


class DirectoryUser(BaseModel):
    user_id: str
    user_name: str | None = None


def build_sequential_assignments(
    users: list[DirectoryUser],
    prefix: str,
    routing_policy: str,
    starting_number: str | None = None,
) -> list[AssignmentRequest]:
    """
    Number users sequentially from a prefix.

    With a starting number, each suffix is zero-padded to the starting
    number's width (``"0100"`` yields ``0100``, ``0101``...). Without one,
    suffixes count from 1 unpadded.

    Raises:
        WorkflowValidationError: If the prefix or starting number is malformed
    """
    if not prefix.startswith(f"{TEL_PREFIX}+"):
        raise WorkflowValidationError("Prefix must start with 'tel:+'")

    if starting_number:
        if not starting_number.isdigit():
            raise WorkflowValidationError("Starting number must contain only digits")
        base = int(starting_number)
        width = len(starting_number)
    else:
        base = 1
        width = 0

    return [
        AssignmentRequest(
            user_id=user.user_id,
            user_name=user.user_name,
            phone_number=f"{prefix}{str(base + index).zfill(width)}",
            routing_policy=routing_policy,
        )
        for index, user in enumerate(users)
    ]


def validate_assignments(
    assignments: list[AssignmentRequest],
) -> list[AssignmentResult]:
    """Validate every phone number; results mirror the request order."""
    results = []
    for request in assignments:
        check = validate_line_uri(request.phone_number)
        results.append(
            AssignmentResult(
                user_id=request.user_id,
                user_name=request.user_name,
                success=check.valid,
                error=check.reason,
            )
        )
    return results


def match_results(
    assignments: list[AssignmentRequest], returned: list[AssignmentResult]
) -> list[AssignmentResult]:
    """
    Order directory results like the request, keyed by user id.

    Repeated user ids consume returned results in order. Requests left without
    a result become indeterminate failures.
    """
    by_user: dict[str, deque[AssignmentResult]] = defaultdict(deque)
    for result in returned:
        by_user[result.user_id].append(result)

    matched = []
    for request in assignments:
        pending = by_user.get(request.user_id)
        if pending:
            result = pending.popleft()
            matched.append(
                result.model_copy(
                    update={"user_name": result.user_name or request.user_name}
                )
            )
        else:
            matched.append(
                AssignmentResult(
                    user_id=request.user_id,
                    user_name=request.user_name,
                    success=False,
                    error=INDETERMINATE_ERROR,
                    indeterminate=True,
                )
            )
    return matched


class BulkAssignmentExecutor:
    """Validates and submits a batch of assignments for one tenant."""

    def __init__(self, directory: RemoteDirectory, timeout_seconds: float = 45.0):
        self.directory = directory
        self.timeout_seconds = timeout_seconds

    async def execute(
        self,
        tenant_id: str,
        assignments: list[AssignmentRequest],
        on_progress: ProgressCallback | None = None,
    ) -> list[AssignmentResult]:
        """
        Validate then submit the batch.

        Args:
            tenant_id: Tenant to assign in
            assignments: Ordered assignment requests
            on_progress: Optional advisory progress callback

        Returns:
            list[AssignmentResult]: One result per request, in request order

        Raises:
            WorkflowValidationError: If the batch is empty
            BulkValidationError: If any phone number is invalid
            RemoteTimeoutError: If the directory call exceeds the timeout
            RemoteCallError: If the directory call fails outright
        """
        if not assignments:
            raise WorkflowValidationError("At least one assignment is required")

        validation = validate_assignments(assignments)
        invalid_count = sum(1 for result in validation if not result.success)
        if invalid_count:
            logger.info(
                "Bulk assignment rejected by validation",
                tenant_id=tenant_id,
                invalid_count=invalid_count,
            )
            raise BulkValidationError(invalid_count, validation)

        total = len(assignments)
        self._report(on_progress, BulkPhase.VALIDATED, total)
        self._report(on_progress, BulkPhase.SUBMITTED, total)
        logger.info("Submitting bulk assignment", tenant_id=tenant_id, total=total)

        try:
            returned = await asyncio.wait_for(
                self.directory.submit_bulk_assignment(tenant_id, assignments),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as e:
            raise RemoteTimeoutError("Bulk assignment", self.timeout_seconds) from e
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or type(e).__name__
            logger.error(
                "Bulk assignment failed", tenant_id=tenant_id, error=message
            )
            raise RemoteCallError(f"Bulk assignment failed: {message}") from e

        results = match_results(assignments, returned)
        self._report(on_progress, BulkPhase.COMPLETED, total)

        succeeded = sum(1 for result in results if result.success)
        logger.info(
            "Bulk assignment finished",
            tenant_id=tenant_id,
            total=total,
            succeeded=succeeded,
            failed=total - succeeded,
            indeterminate=sum(1 for result in results if result.indeterminate),
        )
        return results

    @staticmethod
    def _report(
        on_progress: ProgressCallback | None, phase: BulkPhase, total: int
    ) -> None:
        if on_progress is not None:
            on_progress(
                BulkProgress(phase=phase, total=total, percent=_PHASE_PERCENT[phase])
            )
