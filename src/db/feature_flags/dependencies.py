"""
Feature flag dependencies.

Flags are read once per request into an explicit ``FeatureFlags`` value that
route handlers receive as a parameter.
"""

from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_db
from src.db.feature_flags.repository import FeatureFlagRepository
from src.db.feature_flags.schemas import FeatureFlags, FeatureKey


async def get_feature_flags(session: AsyncSession = Depends(get_db)) -> FeatureFlags:
    flags = await FeatureFlagRepository(session).list_all()
    known = {key.value for key in FeatureKey}
    return FeatureFlags(
        enabled=frozenset(
            FeatureKey(flag.feature_key)
            for flag in flags
            if flag.is_enabled and flag.feature_key in known
        )
    )


def require_feature(
    key: FeatureKey,
) -> Callable[..., Coroutine[Any, Any, FeatureFlags]]:
    """Build a dependency that rejects the request when ``key`` is off."""

    async def dependency(flags: FeatureFlags = Depends(get_feature_flags)) -> FeatureFlags:
        if not flags.is_enabled(key):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Feature '{key.value}' is not enabled",
            )
        return flags

    return dependency
