"""
Authentication and authorization dependencies.

This module provides FastAPI dependencies for handling authentication
and role checks.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.auth import schemas
from src.auth.constants import CookieNames, Role
from src.auth.provider_factory import get_auth_provider
from src.auth.service import AuthProvider

# Security scheme for bearer tokens (fallback for API clients)
security = HTTPBearer(auto_error=False)


async def get_auth_provider_dependency() -> AuthProvider:
    """Dependency to get the configured auth provider."""
    try:
        return get_auth_provider()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to initialize auth provider: {str(e)}",
        ) from e


async def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth_provider: AuthProvider = Depends(get_auth_provider_dependency),
) -> schemas.Session:
    """
    Get the current operator session from cookies or authorization header.

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    session_token = request.cookies.get(CookieNames.SESSION_TOKEN.value)
    if not session_token and credentials:
        session_token = credentials.credentials

    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = await auth_provider.get_session(session_token)
    if not session or not session.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


async def get_current_user(
    session: schemas.Session = Depends(get_current_session),
) -> schemas.User:
    """Get the operator behind the current session."""
    return session.user


async def require_admin(user: schemas.User = Depends(get_current_user)) -> schemas.User:
    """Require admin role."""
    if user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{Role.ADMIN.value}' required",
        )
    return user
