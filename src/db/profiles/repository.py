"""Repository for configuration profile database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.profiles.model import ConfigurationProfile
from src.db.profiles.schemas import ProfileFields


class ProfileRepository:
    """Repository for managing configuration profiles in the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, tenant_id: str, data: ProfileFields) -> ConfigurationProfile:
        profile = ConfigurationProfile(
            tenant_id=tenant_id,
            **data.model_dump(include=set(ProfileFields.model_fields)),
        )
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def get_by_id(
        self, tenant_id: str, profile_id: str
    ) -> ConfigurationProfile | None:
        result = await self.session.execute(
            select(ConfigurationProfile).where(
                ConfigurationProfile.tenant_id == tenant_id,
                ConfigurationProfile.id == profile_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_tenant(self, tenant_id: str) -> list[ConfigurationProfile]:
        result = await self.session.execute(
            select(ConfigurationProfile)
            .where(ConfigurationProfile.tenant_id == tenant_id)
            .order_by(ConfigurationProfile.profile_name)
        )
        return list(result.scalars().all())

    async def update(
        self, profile: ConfigurationProfile, data: ProfileFields
    ) -> ConfigurationProfile:
        for key, value in data.model_dump(include=set(ProfileFields.model_fields)).items():
            setattr(profile, key, value)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def delete(self, profile: ConfigurationProfile) -> None:
        await self.session.delete(profile)
        await self.session.flush()
