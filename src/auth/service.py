"""
AWS Cognito authentication provider.

Operators sign in through the Cognito hosted UI; the API only resolves an
access token into a session and maps Cognito groups onto roles.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from urllib.parse import urljoin

import boto3
import requests
from botocore.exceptions import ClientError

from src.auth import schemas
from src.auth.config import get_auth_settings
from src.auth.constants import OAuthEndpoints, Role, TimeInSeconds
from src.utils.logger import logger


class AuthProvider(ABC):
    """Abstract interface for authentication providers."""

    @abstractmethod
    async def get_session(self, access_token: str) -> schemas.Session | None:
        """Get session information from access token."""
        pass


class CognitoAuthProvider(AuthProvider):
    """AWS Cognito implementation of the AuthProvider interface."""

    def __init__(self):
        settings = get_auth_settings()
        self.user_pool_id = settings.cognito_user_pool_id
        self.client_id = settings.cognito_client_id
        self.cognito_domain = settings.cognito_domain
        self.admin_group = settings.admin_group

        if not all([self.user_pool_id, self.client_id]):
            raise ValueError("COGNITO_USER_POOL_ID and COGNITO_CLIENT_ID must be set")

        self.cognito_client = boto3.client("cognito-idp", region_name=settings.aws_region)
        logger.info("CognitoAuthProvider initialized", client_id=self.client_id)

    async def get_session(self, access_token: str) -> schemas.Session | None:
        """Resolve an access token through the Cognito userinfo endpoint."""
        try:
            response = requests.get(
                urljoin(self.cognito_domain, OAuthEndpoints.USERINFO_ENDPOINT.value),
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=10,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.info("Rejected access token", error=str(e))
            return None

        user_info = response.json()
        user_id = user_info.get("sub")
        if not user_id:
            return None

        user = schemas.User(
            id=user_id,
            email=user_info.get("email", ""),
            name=user_info.get("name") or None,
            role=self._resolve_role(user_info.get("username", user_id)),
        )
        return schemas.Session(
            user=user,
            access_token=access_token,
            expires_at=datetime.now(UTC) + timedelta(seconds=TimeInSeconds.ONE_HOUR),
        )

    def _resolve_role(self, username: str) -> Role:
        try:
            groups_response = self.cognito_client.admin_list_groups_for_user(
                Username=username, UserPoolId=self.user_pool_id
            )
        except ClientError as e:
            logger.warning(
                "Could not read Cognito groups, defaulting to operator",
                username=username,
                error=str(e),
            )
            return Role.OPERATOR

        groups = {group["GroupName"] for group in groups_response.get("Groups", [])}
        return Role.ADMIN if self.admin_group in groups else Role.OPERATOR


class MockAuthProvider(AuthProvider):
    """Mock implementation of AuthProvider for testing and local development."""

    def __init__(self, *, session: schemas.Session | None = None):
        self._session = session

    async def get_session(self, access_token: str) -> schemas.Session | None:
        return self._session
