"""
Configuration management for the auth package.

This module handles environment variable configuration and validation
for the authentication system using Pydantic settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import logger


class AuthSettings(BaseSettings):
    """Configuration for the auth system using Pydantic settings."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    auth_provider: str = Field(
        default="cognito", description="Authentication provider to use"
    )
    aws_region: str = Field(
        default="us-west-1",
        description="AWS region for Cognito (can also be set via AWS_REGION env var)",
    )
    cognito_user_pool_id: str | None = Field(
        default=None, description="Cognito User Pool ID"
    )
    cognito_client_id: str | None = Field(
        default=None, description="Cognito App Client ID"
    )
    cognito_domain: str = Field(
        default="https://voice-manager.auth.us-west-1.amazoncognito.com",
        description="Cognito domain (hosted UI base URL)",
    )
    admin_group: str = Field(
        default="admin", description="Cognito group whose members are admins"
    )


_auth_settings: AuthSettings | None = None


def get_auth_settings() -> AuthSettings:
    """
    Get the global auth settings instance.

    Returns:
        AuthSettings: The global settings instance
    """
    global _auth_settings
    if _auth_settings is None:
        _auth_settings = AuthSettings()
        logger.info(
            "AuthSettings loaded",
            provider=_auth_settings.auth_provider,
            client_id=_auth_settings.cognito_client_id,
        )
    return _auth_settings


def set_auth_settings(settings: AuthSettings) -> None:
    """
    Set the global auth settings instance.

    Args:
        settings: The settings to set
    """
    global _auth_settings
    _auth_settings = settings
