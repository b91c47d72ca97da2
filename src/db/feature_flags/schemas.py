"""Pydantic schemas for feature flags."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class FeatureKey(str, Enum):
    NUMBER_MANAGEMENT = "number_management"
    BULK_ASSIGNMENT = "bulk_assignment"
    CONNECTWISE_INTEGRATION = "connectwise_integration"


class FeatureFlagResponse(BaseModel):
    feature_key: str
    is_enabled: bool
    description: str | None = None
    updated_by: str | None = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class FeatureFlagUpdate(BaseModel):
    is_enabled: bool


class FeatureFlags(BaseModel):
    """Enabled state of every known feature, resolved once per request."""

    enabled: frozenset[FeatureKey] = frozenset()

    def is_enabled(self, key: FeatureKey) -> bool:
        return key in self.enabled
