"""
Auth provider factory.

This module provides a factory function to create the appropriate auth provider
based on configuration.
"""

from src.auth.config import get_auth_settings
from src.auth.service import AuthProvider, CognitoAuthProvider


def create_auth_provider() -> AuthProvider:
    """
    Create an auth provider based on environment configuration.

    Returns:
        AuthProvider: The configured auth provider instance.

    Raises:
        ValueError: If an unknown auth provider is specified.
    """
    provider = get_auth_settings().auth_provider.lower()

    if provider == "cognito":
        return CognitoAuthProvider()
    raise ValueError(f"Unknown auth provider: {provider}")


_auth_provider: AuthProvider | None = None


def get_auth_provider() -> AuthProvider:
    """
    Get the global auth provider instance.

    Returns:
        AuthProvider: The cached auth provider instance.
    """
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = create_auth_provider()
    return _auth_provider


def set_auth_provider(provider: AuthProvider) -> None:
    """
    Set the global auth provider instance.

    Useful for testing.

    Args:
        provider: The provider to use
    """
    global _auth_provider
    _auth_provider = provider
