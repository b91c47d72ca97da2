"""Repository for feature flag database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.feature_flags.model import FeatureFlag


class FeatureFlagRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[FeatureFlag]:
        result = await self.session.execute(
            select(FeatureFlag).order_by(FeatureFlag.feature_key)
        )
        return list(result.scalars().all())

    async def get(self, feature_key: str) -> FeatureFlag | None:
        return await self.session.get(FeatureFlag, feature_key)

    async def set_enabled(
        self, feature_key: str, is_enabled: bool, updated_by: str
    ) -> FeatureFlag:
        """Create or update a flag."""
        flag = await self.get(feature_key)
        if flag is None:
            flag = FeatureFlag(feature_key=feature_key)
            self.session.add(flag)
        flag.is_enabled = is_enabled
        flag.updated_by = updated_by
        await self.session.flush()
        await self.session.refresh(flag)
        return flag
