"""
Auth router.

Sign-in happens in the Cognito hosted UI; the API only reports who the
current operator is.
"""

from fastapi import APIRouter, Depends

from src.auth import schemas
from src.auth.dependencies import get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=schemas.User)
async def get_current_user_info(
    current_user: schemas.User = Depends(get_current_user),
) -> schemas.User:
    """Return the signed-in operator, including their role."""
    return current_user
