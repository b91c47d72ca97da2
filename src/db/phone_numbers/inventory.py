"""
Database-backed local inventory used by the Teams reconciliation workflow.
"""

from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from src.db.phone_numbers.constants import TEAMS_SYNC_ACTOR, NumberStatus, NumberType
from src.db.phone_numbers.model import PhoneNumber
from src.db.phone_numbers.repository import PhoneNumberRepository
from src.utils.logger import logger
from src.workflows.base import LocalInventory
from src.workflows.schemas import (
    ApplyResult,
    Change,
    ChangeAction,
    ChangeError,
    PhoneNumberRecord,
)


def to_record(number: PhoneNumber) -> PhoneNumberRecord:
    return PhoneNumberRecord(
        line_uri=number.line_uri,
        display_name=number.display_name,
        user_principal_name=number.user_principal_name,
        policy=number.online_voice_routing_policy,
        carrier=number.carrier,
        location=number.location,
        number_range=number.number_range,
        status=number.status,
        local_id=number.id,
    )


class PhoneNumberInventory(LocalInventory):
    """Reads and writes the inventory through ``PhoneNumberRepository``."""

    def __init__(self, repository: PhoneNumberRepository, operator: str | None = None):
        self.repository = repository
        self.operator = operator or TEAMS_SYNC_ACTOR

    async def fetch_local_inventory(
        self, tenant_id: str, filters: dict[str, str] | None = None
    ) -> list[PhoneNumberRecord]:
        filters = filters or {}
        numbers = await self.repository.list_numbers(
            tenant_id,
            status=filters.get("status"),
            number_type=filters.get("number_type"),
            search=filters.get("search"),
        )
        return [to_record(number) for number in numbers]

    async def apply_selected_changes(
        self, tenant_id: str, changes: list[Change]
    ) -> ApplyResult:
        result = ApplyResult()
        session = self.repository.session

        for change in changes:
            try:
                async with session.begin_nested():
                    if change.action == ChangeAction.ADD:
                        await self._add(tenant_id, change)
                        result.added += 1
                    else:
                        await self._update(tenant_id, change)
                        result.updated += 1
            except (SQLAlchemyError, LookupError) as e:
                logger.warning(
                    "Failed to apply sync change",
                    tenant_id=tenant_id,
                    line_uri=change.line_uri,
                    action=change.action.value,
                    error=str(e),
                )
                result.errors.append(ChangeError(line_uri=change.line_uri, error=str(e)))

        return result

    async def _add(self, tenant_id: str, change: Change) -> None:
        record = change.record
        await self.repository.create(
            tenant_id,
            line_uri=record.line_uri,
            display_name=record.display_name or None,
            user_principal_name=record.user_principal_name or None,
            online_voice_routing_policy=record.policy or None,
            status=NumberStatus.USED.value,
            number_type=NumberType.DID.value,
            assigned_at=datetime.now(UTC),
            created_by=self.operator,
            last_modified_by=self.operator,
        )

    async def _update(self, tenant_id: str, change: Change) -> None:
        number = None
        if change.local_id:
            number = await self.repository.get_by_id(tenant_id, change.local_id)
        if number is None:
            number = await self.repository.get_by_line_uri(tenant_id, change.line_uri)
        if number is None:
            raise LookupError(f"Phone number {change.line_uri} no longer exists locally")

        record = change.record
        await self.repository.update(
            number,
            display_name=record.display_name or None,
            user_principal_name=record.user_principal_name or None,
            online_voice_routing_policy=record.policy or None,
            last_modified_by=self.operator,
        )
