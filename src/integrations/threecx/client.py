"""Minimal 3CX web client API client used to verify stored credentials."""

from typing import Any

import httpx

from src.db.credentials.schemas import ConnectionTestResult, ThreeCXCredentials
from src.integrations.threecx.exceptions import (
    ThreeCXAuthenticationError,
    ThreeCXError,
    ThreeCXMfaRequiredError,
)
from src.utils.logger import logger

LOGIN_PATH = "/webclient/api/Login/GetAccessToken"


class ThreeCXClient:
    def __init__(
        self,
        credentials: ThreeCXCredentials,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport

    async def login(self, security_code: str | None = None) -> str:
        """
        Exchange username and password for an access token.

        Args:
            security_code: MFA code, for accounts that require one

        Returns:
            Bearer access token

        Raises:
            ThreeCXMfaRequiredError: If a security code is needed
            ThreeCXAuthenticationError: If the credentials are rejected
            ThreeCXError: For transport and server errors
        """
        payload = {
            "Username": self.credentials.username,
            "Password": self.credentials.password,
            "SecurityCode": security_code or "",
        }
        async with httpx.AsyncClient(
            base_url=self.credentials.server_url.rstrip("/"),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(LOGIN_PATH, json=payload)
            except httpx.TimeoutException as e:
                raise ThreeCXError(f"3CX server did not respond within {self.timeout:g}s") from e
            except httpx.RequestError as e:
                raise ThreeCXError(f"Could not reach 3CX server: {e}") from e

        if response.status_code == 401:
            raise ThreeCXAuthenticationError()
        if response.is_error:
            raise ThreeCXError(
                f"3CX login failed with HTTP {response.status_code}", response.status_code
            )

        body: dict[str, Any] = response.json()
        status = body.get("Status")
        if status == "MFARequired" or (
            status != "AuthSuccess" and self.credentials.mfa_enabled and not security_code
        ):
            raise ThreeCXMfaRequiredError()
        if status != "AuthSuccess":
            raise ThreeCXAuthenticationError(f"3CX login rejected: {status or 'unknown status'}")

        token = (body.get("Token") or {}).get("access_token")
        if not token:
            raise ThreeCXError("3CX login response did not include an access token")
        return token

    async def test_connection(self, security_code: str | None = None) -> ConnectionTestResult:
        try:
            await self.login(security_code)
        except ThreeCXError as e:
            logger.warning("3CX connection test failed", error=e.message)
            return ConnectionTestResult(success=False, message=e.message)
        return ConnectionTestResult(
            success=True, message=f"Connected to 3CX server at {self.credentials.server_url}"
        )
