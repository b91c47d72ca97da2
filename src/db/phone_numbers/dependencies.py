"""
Dependencies for phone number inventory endpoints.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user
from src.auth.schemas import User
from src.db.database import get_db
from src.db.phone_numbers.inventory import PhoneNumberInventory
from src.db.phone_numbers.repository import PhoneNumberRepository
from src.db.phone_numbers.service import PhoneNumberService


async def get_phone_number_service(
    session: AsyncSession = Depends(get_db),
) -> PhoneNumberService:
    """Get phone number service instance."""
    return PhoneNumberService(session)


async def get_local_inventory(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PhoneNumberInventory:
    """Get the inventory adapter used by reconciliation, attributed to the operator."""
    return PhoneNumberInventory(PhoneNumberRepository(session), operator=current_user.email)
