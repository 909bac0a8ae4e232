"""Tests for the Auth0 machine token client."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from core.errors import AuthError
from core.oauth2 import InvalidConfigurationError, MachineTokenClient, TokenAcquisitionError

AUTH0_URL = "https://auth.test/oauth/token"
AUDIENCE = "https://m2m.test/"


def _response(status=200, payload=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


@pytest.fixture
async def client():
    client = MachineTokenClient(AUTH0_URL, AUDIENCE, cache_time_seconds=3600)
    yield client
    await client.close()


class TestConfiguration:

    def test_requires_url_and_audience(self):
        with pytest.raises(InvalidConfigurationError):
            MachineTokenClient("", AUDIENCE)
        with pytest.raises(InvalidConfigurationError):
            MachineTokenClient(AUTH0_URL, "")

    def test_errors_are_auth_errors(self):
        assert issubclass(TokenAcquisitionError, AuthError)
        assert issubclass(InvalidConfigurationError, AuthError)

    def test_proxy_endpoint(self):
        client = MachineTokenClient(AUTH0_URL, AUDIENCE, proxy_url="http://proxy.test/token")

        assert client.token_endpoint == "http://proxy.test/token"


class TestGetMachineToken:

    async def test_posts_client_credentials(self, client):
        with patch(
            "aiohttp.ClientSession.post",
            return_value=_response(payload={"access_token": "tok-1", "expires_in": 86400}),
        ) as post:
            token = await client.get_machine_token("client-id", "client-secret")

        assert token == "tok-1"
        args, kwargs = post.call_args
        assert args == (AUTH0_URL,)
        assert kwargs["json"] == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
            "audience": AUDIENCE,
        }

    async def test_token_is_cached(self, client):
        with patch(
            "aiohttp.ClientSession.post",
            return_value=_response(payload={"access_token": "tok-1", "expires_in": 86400}),
        ) as post:
            await client.get_machine_token("client-id", "client-secret")
            token = await client.get_machine_token("client-id", "client-secret")

        assert token == "tok-1"
        assert post.call_count == 1

    async def test_clear_cache_forces_refresh(self, client):
        responses = [
            _response(payload={"access_token": "tok-1"}),
            _response(payload={"access_token": "tok-2"}),
        ]
        with patch("aiohttp.ClientSession.post", side_effect=responses):
            assert await client.get_machine_token("client-id", "client-secret") == "tok-1"
            client.clear_cache()
            assert await client.get_machine_token("client-id", "client-secret") == "tok-2"

    async def test_proxy_receives_auth0_url(self):
        client = MachineTokenClient(AUTH0_URL, AUDIENCE, proxy_url="http://proxy.test/token")
        with patch(
            "aiohttp.ClientSession.post",
            return_value=_response(payload={"access_token": "tok-1"}),
        ) as post:
            await client.get_machine_token("client-id", "client-secret")
        await client.close()

        args, kwargs = post.call_args
        assert args == ("http://proxy.test/token",)
        assert kwargs["json"]["auth0_url"] == AUTH0_URL

    async def test_missing_credentials(self, client):
        with pytest.raises(TokenAcquisitionError, match="required"):
            await client.get_machine_token("", "secret")

    async def test_http_error_status(self, client):
        with patch(
            "aiohttp.ClientSession.post",
            return_value=_response(status=401, text="access_denied"),
        ):
            with pytest.raises(TokenAcquisitionError, match="HTTP 401: access_denied"):
                await client.get_machine_token("client-id", "client-secret")

    async def test_connection_error(self, client):
        with patch("aiohttp.ClientSession.post", side_effect=aiohttp.ClientConnectionError("refused")):
            with pytest.raises(TokenAcquisitionError) as exc_info:
                await client.get_machine_token("client-id", "client-secret")

        assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)

    async def test_response_without_token(self, client):
        with patch("aiohttp.ClientSession.post", return_value=_response(payload={"error": "nope"})):
            with pytest.raises(TokenAcquisitionError, match="access_token"):
                await client.get_machine_token("client-id", "client-secret")

    async def test_context_manager_closes_session(self):
        async with MachineTokenClient(AUTH0_URL, AUDIENCE) as client:
            await client._ensure_session()
            session = client._session

        assert session.closed
        assert client._session is None
