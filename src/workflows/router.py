"""
Workflow router for reconciliation and bulk assignment endpoints.

Teams sync is a multi-step review: start a sync, adjust the selection,
commit or dismiss. Bulk assignment validates a whole batch locally and sends
it to Teams as one operation.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.audit_logs.repository import AuditLogRepository
from src.db.audit_logs.schemas import AuditLogCreate, AuditStatus, ChangeType
from src.db.dependencies import (
    get_audit_log_repository,
    get_profile_repository,
    get_tenant,
)
from src.db.feature_flags.dependencies import require_feature
from src.db.feature_flags.schemas import FeatureFlags, FeatureKey
from src.db.phone_numbers.dependencies import get_local_inventory
from src.db.phone_numbers.inventory import PhoneNumberInventory
from src.db.profiles.repository import ProfileRepository
from src.db.tenants.model import CustomerTenant
from src.integrations.connectwise.dependencies import get_connectwise_service
from src.integrations.connectwise.service import ConnectWiseService
from src.integrations.teams.base import TeamsDirectory
from src.integrations.teams.dependencies import get_teams_directory
from src.utils.logger import logger
from src.workflows.api_schemas import (
    BulkAssignRequest,
    BulkAssignResponse,
    BulkAssignSummary,
    BulkPreviewRequest,
    BulkPreviewResponse,
    SyncSelectionRequest,
)
from src.workflows.bulk import (
    BulkAssignmentExecutor,
    BulkProgress,
    build_sequential_assignments,
    validate_assignments,
)
from src.workflows.dependencies import get_bulk_executor, get_sync_orchestrator
from src.workflows.exceptions import (
    BulkValidationError,
    InvalidSyncStateError,
    RemoteCallError,
    RemoteTimeoutError,
    SyncInProgressError,
    WorkflowError,
    WorkflowValidationError,
)
from src.workflows.schemas import ApplyResult, AssignmentResult
from src.workflows.sync import SyncOrchestrator, SyncSnapshot

router = APIRouter(prefix="/workflows", tags=["Workflows"])

INVENTORY_TARGET = "phone-number-inventory"


def to_http_exception(error: WorkflowError) -> HTTPException:
    """Map the workflow error taxonomy onto HTTP status codes."""
    if isinstance(error, BulkValidationError):
        return HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            detail={
                "message": error.message,
                "invalid_count": error.invalid_count,
                "results": [r.model_dump() for r in error.results],
            },
        )
    if isinstance(error, WorkflowValidationError):
        return HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=error.message
        )
    if isinstance(error, (SyncInProgressError, InvalidSyncStateError)):
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=error.message)
    if isinstance(error, RemoteTimeoutError):
        return HTTPException(status_code=HTTPStatus.GATEWAY_TIMEOUT, detail=error.message)
    if isinstance(error, RemoteCallError):
        return HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=error.message)
    return HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=error.message)


def _assignment_audit(
    result: AssignmentResult,
    request_phone: str,
    request_policy: str,
    tenant: CustomerTenant,
    operator: User,
) -> AuditLogCreate:
    if result.success:
        description = (
            f"Bulk assigned phone number {request_phone} "
            f"and routing policy {request_policy}"
        )
    else:
        description = (
            f"Failed to assign phone number {request_phone} "
            f"and routing policy {request_policy}"
        )
    return AuditLogCreate(
        operator_email=operator.email,
        operator_name=operator.display_name,
        tenant_id=tenant.id,
        tenant_name=tenant.tenant_name,
        target_user_upn=result.user_id,
        target_user_name=result.user_name or result.user_id,
        target_user_id=result.user_id,
        change_type=ChangeType.BULK_VOICE_ASSIGNMENT,
        change_description=description,
        phone_number=request_phone,
        routing_policy=request_policy,
        status=AuditStatus.SUCCESS if result.success else AuditStatus.FAILED,
        error_message=result.error,
    )


@router.post("/teams-sync/{tenant_id}", response_model=SyncSnapshot)
async def start_teams_sync(
    current_user: User = Depends(get_current_user),
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
    directory: TeamsDirectory = Depends(get_teams_directory),
    inventory: PhoneNumberInventory = Depends(get_local_inventory),
) -> SyncSnapshot:
    """
    Compare the Teams directory with the local inventory.

    Returns the review to approve. An empty diff goes straight back to idle.

    Raises:
        HTTPException: 409 if a sync or commit is running, 502/504 if a
            fetch fails or times out
    """
    try:
        return await orchestrator.sync(directory, inventory)
    except WorkflowError as e:
        raise to_http_exception(e) from e


@router.get("/teams-sync/{tenant_id}", response_model=SyncSnapshot)
async def get_teams_sync(
    current_user: User = Depends(get_current_user),
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> SyncSnapshot:
    return orchestrator.snapshot()


@router.put("/teams-sync/{tenant_id}/selection", response_model=SyncSnapshot)
async def update_teams_sync_selection(
    request: SyncSelectionRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> SyncSnapshot:
    try:
        return orchestrator.select(request.to_add, request.to_update)
    except WorkflowError as e:
        raise to_http_exception(e) from e


@router.post("/teams-sync/{tenant_id}/commit", response_model=SyncSnapshot)
async def commit_teams_sync(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
    inventory: PhoneNumberInventory = Depends(get_local_inventory),
    audit_logs: AuditLogRepository = Depends(get_audit_log_repository),
) -> SyncSnapshot:
    """
    Write the selected adds and updates to the local inventory.

    Per-number failures are listed in ``last_result.errors``; the commit as a
    whole is logged as one audit entry. The inventory writes and the audit
    entry are committed before the review is closed.
    """

    async def persist(result: ApplyResult) -> None:
        status = AuditStatus.SUCCESS
        if result.errors:
            applied = result.added + result.updated
            status = AuditStatus.PARTIAL if applied else AuditStatus.FAILED
        await audit_logs.create_many(
            [
                AuditLogCreate(
                    operator_email=current_user.email,
                    operator_name=current_user.display_name,
                    tenant_id=tenant.id,
                    tenant_name=tenant.tenant_name,
                    target_user_upn=INVENTORY_TARGET,
                    target_user_name="Phone number inventory",
                    change_type=ChangeType.TEAMS_SYNC,
                    change_description=(
                        f"Teams sync added {result.added} and updated "
                        f"{result.updated} numbers"
                    ),
                    status=status,
                    error_message="; ".join(
                        f"{err.line_uri}: {err.error}" for err in result.errors
                    )
                    or None,
                )
            ]
        )
        await audit_logs.session.commit()

    try:
        return await orchestrator.commit(inventory, on_applied=persist)
    except WorkflowError as e:
        raise to_http_exception(e) from e


@router.delete("/teams-sync/{tenant_id}", response_model=SyncSnapshot)
async def dismiss_teams_sync(
    current_user: User = Depends(get_current_user),
    orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> SyncSnapshot:
    try:
        return orchestrator.dismiss()
    except WorkflowError as e:
        raise to_http_exception(e) from e


@router.post("/bulk-assign/{tenant_id}", response_model=BulkAssignResponse)
async def bulk_assign(
    request: BulkAssignRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    flags: FeatureFlags = Depends(require_feature(FeatureKey.BULK_ASSIGNMENT)),
    executor: BulkAssignmentExecutor = Depends(get_bulk_executor),
    audit_logs: AuditLogRepository = Depends(get_audit_log_repository),
    connectwise: ConnectWiseService = Depends(get_connectwise_service),
) -> BulkAssignResponse:
    """
    Assign phone numbers and voice routing policies to many users at once.

    One invalid number rejects the whole batch with 422 before anything is
    sent to Teams. Otherwise every user gets a result and an audit entry;
    users Teams reported nothing for are marked indeterminate.

    Raises:
        HTTPException: 422 on validation failure, 502/504 if the Teams call
            fails or times out, 403 if a ticket is given while the
            ConnectWise integration is off
    """
    if request.ticket and not flags.is_enabled(FeatureKey.CONNECTWISE_INTEGRATION):
        raise HTTPException(
            status_code=HTTPStatus.FORBIDDEN,
            detail=f"Feature '{FeatureKey.CONNECTWISE_INTEGRATION.value}' is not enabled",
        )

    progress: list[BulkProgress] = []
    try:
        results = await executor.execute(tenant.id, request.assignments, progress.append)
    except WorkflowError as e:
        raise to_http_exception(e) from e

    await audit_logs.create_many(
        [
            _assignment_audit(
                result,
                assignment.phone_number,
                assignment.routing_policy,
                tenant,
                current_user,
            )
            for result, assignment in zip(results, request.assignments)
        ]
    )

    ticket_update = None
    if request.ticket:
        ticket_update = await connectwise.document_bulk_assignment(
            tenant.id, request.ticket, results, current_user.display_name
        )

    succeeded = sum(1 for r in results if r.success)
    logger.info(
        "Bulk assignment request completed",
        tenant_id=tenant.id,
        operator=current_user.email,
        succeeded=succeeded,
        total=len(results),
    )
    return BulkAssignResponse(
        results=results,
        summary=BulkAssignSummary(
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            indeterminate=sum(1 for r in results if r.indeterminate),
        ),
        progress=progress,
        ticket_update=ticket_update,
    )


@router.post("/bulk-assign/{tenant_id}/preview", response_model=BulkPreviewResponse)
async def preview_bulk_assign(
    request: BulkPreviewRequest,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    flags: FeatureFlags = Depends(require_feature(FeatureKey.BULK_ASSIGNMENT)),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> BulkPreviewResponse:
    """
    Number the selected users sequentially and validate the result.

    Prefix and policy come from the request, falling back to the given
    configuration profile. Nothing is sent to Teams.
    """
    prefix = request.phone_number_prefix
    policy = request.routing_policy
    if request.profile_id:
        profile = await profiles.get_by_id(tenant.id, request.profile_id)
        if profile is None:
            raise HTTPException(
                status_code=HTTPStatus.NOT_FOUND, detail="Profile not found"
            )
        prefix = prefix or profile.phone_number_prefix
        policy = policy or profile.default_routing_policy

    if not prefix or not policy:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            detail="A phone number prefix and routing policy are required",
        )

    try:
        assignments = build_sequential_assignments(
            request.users, prefix, policy, request.starting_number
        )
    except WorkflowError as e:
        raise to_http_exception(e) from e

    validation = validate_assignments(assignments)
    return BulkPreviewResponse(
        assignments=assignments,
        validation=validation,
        invalid_count=sum(1 for r in validation if not r.success),
    )
