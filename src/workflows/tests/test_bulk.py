"""Tests for bulk assignment validation, submission and result matching."""

import pytest

from src.workflows.bulk import (
    INDETERMINATE_ERROR,
    BulkAssignmentExecutor,
    BulkPhase,
    DirectoryUser,
    build_sequential_assignments,
    match_results,
    validate_assignments,
)
from src.workflows.exceptions import (
    BulkValidationError,
    RemoteCallError,
    RemoteTimeoutError,
    WorkflowValidationError,
)
from src.workflows.schemas import AssignmentRequest, AssignmentResult
from src.workflows.tests.fakes import FakeDirectory


def assignment(user_id: str, phone: str = "tel:+15551230001") -> AssignmentRequest:
    return AssignmentRequest(
        user_id=user_id,
        user_name=user_id.title(),
        phone_number=phone,
        routing_policy="US-National",
    )


class TestSequentialAssignments:
    def test_zero_padded_from_starting_number(self):
        users = [DirectoryUser(user_id="a"), DirectoryUser(user_id="b")]

        result = build_sequential_assignments(
            users, "tel:+1555123", "US-National", "0100"
        )

        assert [a.phone_number for a in result] == [
            "tel:+15551230100",
            "tel:+15551230101",
        ]
        assert all(a.routing_policy == "US-National" for a in result)

    def test_counts_from_one_without_starting_number(self):
        users = [DirectoryUser(user_id=str(i)) for i in range(3)]

        result = build_sequential_assignments(users, "tel:+1555123000", "P")

        assert [a.phone_number[-2:] for a in result] == ["01", "02", "03"]

    def test_prefix_must_be_a_line_uri(self):
        with pytest.raises(WorkflowValidationError):
            build_sequential_assignments([DirectoryUser(user_id="a")], "+1555", "P")

    def test_starting_number_must_be_digits(self):
        with pytest.raises(WorkflowValidationError):
            build_sequential_assignments(
                [DirectoryUser(user_id="a")], "tel:+1555", "P", "01a"
            )


class TestValidateAssignments:
    def test_results_mirror_request_order(self):
        results = validate_assignments(
            [assignment("a"), assignment("b", "5551230002"), assignment("c")]
        )

        assert [r.user_id for r in results] == ["a", "b", "c"]
        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "Must start with 'tel:'"


class TestMatchResults:
    def test_reorders_by_user_id(self):
        requests = [assignment("a"), assignment("b")]
        returned = [
            AssignmentResult(user_id="b", success=False, error="Policy not found"),
            AssignmentResult(user_id="a", success=True),
        ]

        matched = match_results(requests, returned)

        assert [r.user_id for r in matched] == ["a", "b"]
        assert matched[0].success is True
        assert matched[1].error == "Policy not found"
        assert matched[0].user_name == "A"

    def test_missing_results_are_indeterminate(self):
        matched = match_results([assignment("a"), assignment("b")], [])

        assert all(r.indeterminate for r in matched)
        assert all(not r.success for r in matched)
        assert matched[0].error == INDETERMINATE_ERROR

    def test_repeated_user_ids_consume_results_in_order(self):
        requests = [assignment("a"), assignment("a")]
        returned = [
            AssignmentResult(user_id="a", success=True),
            AssignmentResult(user_id="a", success=False, error="second"),
        ]

        matched = match_results(requests, returned)

        assert [r.success for r in matched] == [True, False]


class TestBulkAssignmentExecutor:
    @pytest.mark.asyncio
    async def test_invalid_batch_is_rejected_before_submission(self):
        directory = FakeDirectory()
        executor = BulkAssignmentExecutor(directory)

        with pytest.raises(BulkValidationError) as exc_info:
            await executor.execute(
                "t1", [assignment("a"), assignment("b", "tel:+123")]
            )

        assert exc_info.value.invalid_count == 1
        assert len(exc_info.value.results) == 2
        assert directory.submitted == []

    @pytest.mark.asyncio
    async def test_empty_batch_is_rejected(self):
        with pytest.raises(WorkflowValidationError):
            await BulkAssignmentExecutor(FakeDirectory()).execute("t1", [])

    @pytest.mark.asyncio
    async def test_successful_batch_reports_phases(self):
        directory = FakeDirectory()
        progress = []

        results = await BulkAssignmentExecutor(directory).execute(
            "t1", [assignment("a"), assignment("b")], progress.append
        )

        assert all(r.success for r in results)
        assert len(directory.submitted) == 1
        assert [p.phase for p in progress] == [
            BulkPhase.VALIDATED,
            BulkPhase.SUBMITTED,
            BulkPhase.COMPLETED,
        ]
        assert [p.percent for p in progress] == [10, 50, 100]
        assert all(p.estimated for p in progress)

    @pytest.mark.asyncio
    async def test_partial_directory_response(self):
        directory = FakeDirectory(
            results=[AssignmentResult(user_id="b", success=True)]
        )

        results = await BulkAssignmentExecutor(directory).execute(
            "t1", [assignment("a"), assignment("b")]
        )

        assert results[0].indeterminate is True
        assert results[1].success is True

    @pytest.mark.asyncio
    async def test_directory_failure(self):
        directory = FakeDirectory(error=RuntimeError("pwsh exited with code 1"))

        with pytest.raises(RemoteCallError) as exc_info:
            await BulkAssignmentExecutor(directory).execute("t1", [assignment("a")])

        assert "pwsh exited with code 1" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_directory_timeout(self):
        executor = BulkAssignmentExecutor(FakeDirectory(delay=1), timeout_seconds=0.01)

        with pytest.raises(RemoteTimeoutError):
            await executor.execute("t1", [assignment("a")])
