"""Tests for the 3CX credential check."""

import json

import httpx
import pytest

from src.db.credentials.schemas import ThreeCXCredentials
from src.integrations.threecx.client import LOGIN_PATH, ThreeCXClient
from src.integrations.threecx.exceptions import (
    ThreeCXAuthenticationError,
    ThreeCXError,
    ThreeCXMfaRequiredError,
)


def make_client(handler, mfa_enabled: bool = False) -> ThreeCXClient:
    credentials = ThreeCXCredentials(
        server_url="https://pbx.contoso.example/",
        username="admin",
        password="s3cret",
        mfa_enabled=mfa_enabled,
    )
    return ThreeCXClient(credentials, transport=httpx.MockTransport(handler))


def token_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200, json={"Status": "AuthSuccess", "Token": {"access_token": "tok-1"}}
    )


class TestThreeCXClient:
    @pytest.mark.asyncio
    async def test_login_posts_credentials(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return token_response(request)

        token = await make_client(handler).login("123456")

        assert token == "tok-1"
        assert seen[0].url.path == LOGIN_PATH
        assert json.loads(seen[0].content) == {
            "Username": "admin",
            "Password": "s3cret",
            "SecurityCode": "123456",
        }

    @pytest.mark.asyncio
    async def test_mfa_required_status(self):
        client = make_client(lambda request: httpx.Response(200, json={"Status": "MFARequired"}))

        with pytest.raises(ThreeCXMfaRequiredError):
            await client.login()

    @pytest.mark.asyncio
    async def test_mfa_account_without_code(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"Status": "AuthFailed"}),
            mfa_enabled=True,
        )

        with pytest.raises(ThreeCXMfaRequiredError):
            await client.login()

    @pytest.mark.asyncio
    async def test_rejected_credentials(self):
        client = make_client(lambda request: httpx.Response(200, json={"Status": "AuthFailed"}))

        with pytest.raises(ThreeCXAuthenticationError):
            await client.login()

    @pytest.mark.asyncio
    async def test_http_401(self):
        client = make_client(lambda request: httpx.Response(401))

        with pytest.raises(ThreeCXAuthenticationError):
            await client.login()

    @pytest.mark.asyncio
    async def test_missing_token(self):
        client = make_client(lambda request: httpx.Response(200, json={"Status": "AuthSuccess"}))

        with pytest.raises(ThreeCXError):
            await client.login()

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ThreeCXError) as exc_info:
            await make_client(handler).login()

        assert "Could not reach" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_test_reports_failure(self):
        client = make_client(lambda request: httpx.Response(503))

        result = await client.test_connection()

        assert result.success is False
        assert "503" in result.message

    @pytest.mark.asyncio
    async def test_connection_test_success(self):
        result = await make_client(token_response).test_connection()

        assert result.success is True
        assert "pbx.contoso.example" in result.message
