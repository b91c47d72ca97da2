"""Feature flag administration router."""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from src.auth.dependencies import require_admin
from src.auth.schemas import User
from src.db.dependencies import get_feature_flag_repository
from src.db.feature_flags.repository import FeatureFlagRepository
from src.db.feature_flags.schemas import (
    FeatureFlagResponse,
    FeatureFlagUpdate,
    FeatureKey,
)
from src.utils.logger import logger

router = APIRouter(prefix="/feature-flags", tags=["Feature Flags"])


@router.get("", response_model=list[FeatureFlagResponse])
async def list_feature_flags(
    current_user: User = Depends(require_admin),
    repository: FeatureFlagRepository = Depends(get_feature_flag_repository),
) -> list[FeatureFlagResponse]:
    flags = await repository.list_all()
    return [FeatureFlagResponse.model_validate(f) for f in flags]


@router.put("/{feature_key}", response_model=FeatureFlagResponse)
async def set_feature_flag(
    feature_key: str,
    data: FeatureFlagUpdate,
    current_user: User = Depends(require_admin),
    repository: FeatureFlagRepository = Depends(get_feature_flag_repository),
) -> FeatureFlagResponse:
    """
    Turn a feature on or off.

    Raises:
        HTTPException: 404 for a key the application does not know
    """
    if feature_key not in {key.value for key in FeatureKey}:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail=f"Unknown feature '{feature_key}'"
        )
    flag = await repository.set_enabled(feature_key, data.is_enabled, current_user.email)
    logger.info(
        "Feature flag updated",
        feature_key=feature_key,
        is_enabled=data.is_enabled,
        user_id=current_user.id,
    )
    return FeatureFlagResponse.model_validate(flag)
