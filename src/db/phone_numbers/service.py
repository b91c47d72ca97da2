"""
Service layer for the phone number inventory.
"""

from datetime import UTC, datetime

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.phone_numbers.constants import NumberStatus
from src.db.phone_numbers.lifecycle import LifecycleManager
from src.db.phone_numbers.model import PhoneNumber
from src.db.phone_numbers.ranges import InvalidRangeError, find_next_available
from src.db.phone_numbers.repository import PhoneNumberRepository
from src.db.phone_numbers.schemas import (
    BulkImportResponse,
    ImportFailure,
    LifecycleRunResult,
    LifecycleStats,
    NextAvailableResponse,
    NumberStatistics,
    PhoneNumberCreate,
    PhoneNumberImportRow,
    PhoneNumberUpdate,
)
from src.utils.logger import logger
from src.workflows.validation import validate_line_uri


class PhoneNumberService:
    """Service for managing a tenant's phone number inventory."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = PhoneNumberRepository(session)
        self.lifecycle = LifecycleManager(self.repository)

    async def list_numbers(
        self,
        tenant_id: str,
        status_filter: str | None = None,
        number_type: str | None = None,
        search: str | None = None,
    ) -> list[PhoneNumber]:
        return await self.repository.list_numbers(
            tenant_id, status=status_filter, number_type=number_type, search=search
        )

    async def get_number(self, tenant_id: str, number_id: str) -> PhoneNumber:
        """
        Get an inventory row.

        Raises:
            HTTPException: If the number does not exist in this tenant
        """
        number = await self.repository.get_by_id(tenant_id, number_id)
        if not number:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Phone number not found"
            )
        return number

    async def _ensure_unique(self, tenant_id: str, line_uri: str) -> None:
        if await self.repository.get_by_line_uri(tenant_id, line_uri):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Phone number {line_uri} already exists for this tenant",
            )

    @staticmethod
    def _assignment_fields(data: PhoneNumberCreate | PhoneNumberImportRow) -> dict:
        fields = data.model_dump(mode="json")
        if fields["status"] == NumberStatus.USED.value:
            fields["assigned_at"] = datetime.now(UTC)
        return fields

    async def create_number(
        self, tenant_id: str, data: PhoneNumberCreate, operator: str
    ) -> PhoneNumber:
        """
        Add a number to the inventory.

        Raises:
            HTTPException: If the line URI already exists for the tenant
        """
        await self._ensure_unique(tenant_id, data.line_uri)
        number = await self.repository.create(
            tenant_id,
            **self._assignment_fields(data),
            created_by=operator,
            last_modified_by=operator,
        )
        logger.info("Phone number created", tenant_id=tenant_id, line_uri=number.line_uri)
        return number

    async def update_number(
        self, tenant_id: str, number_id: str, data: PhoneNumberUpdate, operator: str
    ) -> PhoneNumber:
        number = await self.get_number(tenant_id, number_id)
        fields = data.model_dump(mode="json", exclude_unset=True)

        new_line_uri = fields.get("line_uri")
        if new_line_uri and new_line_uri != number.line_uri:
            await self._ensure_unique(tenant_id, new_line_uri)
        if (
            fields.get("status") == NumberStatus.USED.value
            and number.status != NumberStatus.USED.value
        ):
            fields["assigned_at"] = datetime.now(UTC)

        return await self.repository.update(
            number, **fields, last_modified_by=operator
        )

    async def delete_number(self, tenant_id: str, number_id: str) -> None:
        number = await self.get_number(tenant_id, number_id)
        await self.repository.delete(number)
        logger.info("Phone number deleted", tenant_id=tenant_id, line_uri=number.line_uri)

    async def bulk_import(
        self, tenant_id: str, rows: list[PhoneNumberImportRow], operator: str
    ) -> BulkImportResponse:
        """
        Import rows one by one; a bad row is reported and skipped.

        Each insert runs in a savepoint so a constraint violation only
        rolls back its own row.
        """
        existing = set(await self.repository.list_line_uris(tenant_id))
        created = 0
        failed: list[ImportFailure] = []

        for row in rows:
            check = validate_line_uri(row.line_uri)
            if not check.valid:
                failed.append(ImportFailure(line_uri=row.line_uri, error=check.reason))
                continue
            if row.line_uri in existing:
                failed.append(
                    ImportFailure(line_uri=row.line_uri, error="Duplicate line URI")
                )
                continue
            try:
                async with self.session.begin_nested():
                    await self.repository.create(
                        tenant_id,
                        **self._assignment_fields(row),
                        created_by=operator,
                        last_modified_by=operator,
                    )
            except IntegrityError as e:
                failed.append(ImportFailure(line_uri=row.line_uri, error=str(e.orig)))
                continue
            existing.add(row.line_uri)
            created += 1

        logger.info(
            "Bulk import finished",
            tenant_id=tenant_id,
            created=created,
            failed=len(failed),
        )
        return BulkImportResponse(created=created, failed=failed)

    async def statistics(self, tenant_id: str) -> NumberStatistics:
        by_status = await self.repository.count_by(tenant_id, "status")
        by_type = await self.repository.count_by(tenant_id, "number_type")
        return NumberStatistics(
            total=sum(by_status.values()), by_status=by_status, by_type=by_type
        )

    async def next_available(
        self, tenant_id: str, number_range: str
    ) -> NextAvailableResponse:
        line_uris = await self.repository.list_line_uris(tenant_id)
        try:
            return find_next_available(number_range, line_uris)
        except InvalidRangeError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
            ) from e

    async def reserve(
        self, tenant_id: str, number_id: str, reserved_by: str, operator: str
    ) -> PhoneNumber:
        number = await self.get_number(tenant_id, number_id)
        return await self.lifecycle.reserve(number, reserved_by, operator)

    async def release(self, tenant_id: str, number_id: str, operator: str) -> PhoneNumber:
        number = await self.get_number(tenant_id, number_id)
        return await self.lifecycle.release(number, operator)

    async def run_lifecycle(self, tenant_id: str) -> LifecycleRunResult:
        return await self.lifecycle.run(tenant_id)

    async def lifecycle_stats(self, tenant_id: str) -> LifecycleStats:
        return await self.lifecycle.stats(tenant_id)
