"""
Configuration profile router.

Profiles are named defaults (number prefix and routing policy) that
operators apply to pre-fill assignment forms.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.dependencies import get_profile_repository, get_tenant
from src.db.profiles.model import ConfigurationProfile
from src.db.profiles.repository import ProfileRepository
from src.db.profiles.schemas import (
    ProfileCreate,
    ProfileDefaults,
    ProfileResponse,
    ProfileUpdate,
)
from src.db.tenants.model import CustomerTenant

router = APIRouter(prefix="/tenants/{tenant_id}/profiles", tags=["Profiles"])


async def _get_profile(
    repository: ProfileRepository, tenant_id: str, profile_id: str
) -> ConfigurationProfile:
    profile = await repository.get_by_id(tenant_id, profile_id)
    if not profile:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Profile not found")
    return profile


@router.get("", response_model=list[ProfileResponse])
async def list_profiles(
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> list[ProfileResponse]:
    profiles = await repository.list_for_tenant(tenant.id)
    return [ProfileResponse.model_validate(p) for p in profiles]


@router.post("", response_model=ProfileResponse, status_code=HTTPStatus.CREATED)
async def create_profile(
    data: ProfileCreate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileResponse:
    profile = await repository.create(tenant.id, data)
    return ProfileResponse.model_validate(profile)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileResponse:
    profile = await _get_profile(repository, tenant.id, profile_id)
    return ProfileResponse.model_validate(profile)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    data: ProfileUpdate,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileResponse:
    """
    Replace a profile's fields.

    Raises:
        HTTPException: 403 if the body tries to move the profile to another tenant
    """
    if data.tenant_id is not None and data.tenant_id != tenant.id:
        raise HTTPException(
            status_code=HTTPStatus.FORBIDDEN,
            detail="Profiles cannot be moved to another tenant",
        )
    profile = await _get_profile(repository, tenant.id, profile_id)
    profile = await repository.update(profile, data)
    return ProfileResponse.model_validate(profile)


@router.delete("/{profile_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_profile(
    profile_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> None:
    profile = await _get_profile(repository, tenant.id, profile_id)
    await repository.delete(profile)


@router.post("/{profile_id}/apply", response_model=ProfileDefaults)
async def apply_profile(
    profile_id: str,
    tenant: CustomerTenant = Depends(get_tenant),
    current_user: User = Depends(get_current_user),
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileDefaults:
    """Return the values a profile pre-fills; nothing is changed."""
    profile = await _get_profile(repository, tenant.id, profile_id)
    return ProfileDefaults(
        profile_id=profile.id,
        phone_number_prefix=profile.phone_number_prefix,
        routing_policy=profile.default_routing_policy,
    )
