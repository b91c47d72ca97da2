"""
Phone number lifecycle transitions.

    available -> reserved -> aging -> available

Released numbers sit in ``aging`` for a quarantine period before they can be
handed out again. Expired aging numbers are returned to ``available`` when a
lifecycle run is triggered.
"""

from datetime import UTC, datetime, timedelta

from fastapi import HTTPException, status

from src.db.phone_numbers.constants import (
    AGING_EXPIRING_SOON_DAYS,
    AGING_PERIOD_DAYS,
    LIFECYCLE_ACTOR,
    NumberStatus,
)
from src.db.phone_numbers.model import PhoneNumber
from src.db.phone_numbers.repository import PhoneNumberRepository
from src.db.phone_numbers.schemas import LifecycleRunResult, LifecycleStats
from src.utils.logger import logger


class LifecycleManager:
    """Applies lifecycle transitions to inventory rows."""

    def __init__(
        self,
        repository: PhoneNumberRepository,
        aging_period_days: int = AGING_PERIOD_DAYS,
    ):
        self.repository = repository
        self.aging_period = timedelta(days=aging_period_days)

    async def reserve(
        self, number: PhoneNumber, reserved_by: str, initiated_by: str
    ) -> PhoneNumber:
        if number.status != NumberStatus.AVAILABLE.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Number is not available (current status: {number.status})",
            )
        logger.info(
            "Reserving number", line_uri=number.line_uri, reserved_by=reserved_by
        )
        return await self.repository.update(
            number,
            status=NumberStatus.RESERVED.value,
            reserved_by=reserved_by,
            reserved_at=datetime.now(UTC),
            last_modified_by=initiated_by,
        )

    async def release(self, number: PhoneNumber, initiated_by: str) -> PhoneNumber:
        if number.status != NumberStatus.RESERVED.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Number is not reserved (current status: {number.status})",
            )
        aging_until = datetime.now(UTC) + self.aging_period
        logger.info(
            "Releasing number to aging",
            line_uri=number.line_uri,
            aging_until=aging_until.isoformat(),
        )
        return await self.repository.update(
            number,
            status=NumberStatus.AGING.value,
            aging_until=aging_until,
            last_modified_by=initiated_by,
        )

    async def run(self, tenant_id: str, now: datetime | None = None) -> LifecycleRunResult:
        """Return every expired aging number of the tenant to available."""
        now = now or datetime.now(UTC)
        expired = await self.repository.list_expired_aging(tenant_id, now)
        for number in expired:
            await self.repository.update(
                number,
                status=NumberStatus.AVAILABLE.value,
                reserved_by=None,
                reserved_at=None,
                aging_until=None,
                last_modified_by=LIFECYCLE_ACTOR,
            )
        logger.info(
            "Lifecycle check complete", tenant_id=tenant_id, aging_to_available=len(expired)
        )
        return LifecycleRunResult(aging_to_available=len(expired), timestamp=now)

    async def stats(self, tenant_id: str, now: datetime | None = None) -> LifecycleStats:
        now = now or datetime.now(UTC)
        by_status = await self.repository.count_by(tenant_id, "status")
        expiring_soon = await self.repository.count_aging_before(
            tenant_id, now + timedelta(days=AGING_EXPIRING_SOON_DAYS)
        )
        return LifecycleStats(
            total=sum(by_status.values()),
            available=by_status.get(NumberStatus.AVAILABLE.value, 0),
            used=by_status.get(NumberStatus.USED.value, 0),
            reserved=by_status.get(NumberStatus.RESERVED.value, 0),
            aging=by_status.get(NumberStatus.AGING.value, 0),
            aging_expiring_soon=expiring_soon,
        )
