"""Auth0 machine-to-machine token client with in-process caching."""

import asyncio
import logging

import aiohttp

from core.oauth2.exceptions import InvalidConfigurationError, TokenAcquisitionError
from core.oauth2.models import OAuth2Token

logger = logging.getLogger(__name__)


class MachineTokenClient:
    """
    Client credentials token provider for Auth0.

    Tokens are cached per client id and reused until they expire or until
    the configured cache time elapses, whichever comes first. When a proxy
    server is configured, the grant is posted to the proxy, which forwards
    it to Auth0.
    """

    def __init__(
        self,
        auth0_url: str,
        audience: str,
        cache_time_seconds: float | None = None,
        proxy_url: str | None = None,
        timeout_seconds: float = 30,
    ):
        if not auth0_url:
            raise InvalidConfigurationError("AUTH0_URL is required for machine tokens")
        if not audience:
            raise InvalidConfigurationError("AUTH0_AUDIENCE is required for machine tokens")

        self.auth0_url = auth0_url
        self.audience = audience
        self.cache_time_seconds = cache_time_seconds
        self.proxy_url = proxy_url or None
        self.timeout_seconds = timeout_seconds

        self._tokens: dict[str, OAuth2Token] = {}
        self._lock = asyncio.Lock()
        self._session: aiohttp.ClientSession | None = None

        logger.debug(
            "Initialized machine token client",
            extra={"http_url": self.token_endpoint, "via_proxy": self.proxy_url is not None},
        )

    @property
    def token_endpoint(self) -> str:
        return self.proxy_url or self.auth0_url

    async def __aenter__(self) -> "MachineTokenClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def get_machine_token(self, client_id: str, client_secret: str) -> str:
        """
        Get a bearer token for the given client credentials.

        Raises:
            TokenAcquisitionError: If the token cannot be acquired
        """
        if not client_id or not client_secret:
            raise TokenAcquisitionError("Client id and client secret are required for machine tokens")

        async with self._lock:
            cached = self._tokens.get(client_id)
            if cached is not None and not cached.is_expired():
                return cached.access_token

            token = await self._acquire_token(client_id, client_secret)
            self._tokens[client_id] = token
            return token.access_token

    async def _acquire_token(self, client_id: str, client_secret: str) -> OAuth2Token:
        session = await self._ensure_session()

        request_data = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "audience": self.audience,
        }
        if self.proxy_url:
            request_data["auth0_url"] = self.auth0_url

        try:
            async with session.post(
                self.token_endpoint,
                json=request_data,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error(
                        "Machine token acquisition failed",
                        extra={"http_status": response.status, "error_message": error_text[:200]},
                    )
                    raise TokenAcquisitionError(f"HTTP {response.status}: {error_text[:200]}")

                response_data = await response.json()

        except aiohttp.ClientError as e:
            logger.error("HTTP error during machine token acquisition", extra={"error_message": str(e)})
            raise TokenAcquisitionError("HTTP error during machine token acquisition", cause=e) from e

        if not isinstance(response_data, dict) or "access_token" not in response_data:
            raise TokenAcquisitionError("Token response did not contain an access_token")

        logger.debug(
            "Acquired machine token",
            extra={"expires_in": response_data.get("expires_in")},
        )
        return OAuth2Token.from_response(response_data, max_age_seconds=self.cache_time_seconds)

    def clear_cache(self) -> None:
        self._tokens.clear()

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["MachineTokenClient"]
