"""Async REST client for the Submission and Challenge APIs."""

import asyncio
import logging
from typing import Any, Mapping

import aiohttp

from core.errors.exceptions import ProcessorError, classify_http_status
from core.types import ErrorCategory

logger = logging.getLogger(__name__)


class SubmissionApiError(ProcessorError):
    """
    Outbound API call failure.

    Carries the response diagnostics (status, body, headers) when the service
    answered, and the request details (method, URL, headers) in every case.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        category: ErrorCategory = ErrorCategory.TRANSIENT,
        response_body: str | None = None,
        response_headers: Mapping[str, str] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_headers: Mapping[str, str] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.category = category
        self.response_body = response_body
        self.response_headers = dict(response_headers) if response_headers else {}
        self.request_method = request_method
        self.request_url = request_url
        self.request_headers = dict(request_headers) if request_headers else {}

    @property
    def has_response(self) -> bool:
        return self.status_code is not None


_STATUS_LABELS: dict[int, str] = {
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    429: "Rate limited",
}


def classify_api_error(
    status: int,
    method: str,
    url: str,
    response_body: str | None = None,
    response_headers: Mapping[str, str] | None = None,
    request_headers: Mapping[str, str] | None = None,
) -> SubmissionApiError:
    """Build a SubmissionApiError for a non-2xx status with its category."""
    if status in _STATUS_LABELS:
        label = _STATUS_LABELS[status]
    elif 400 <= status < 500:
        label = "Client error"
    elif status >= 500:
        label = "Server error"
    else:
        label = "HTTP error"

    return SubmissionApiError(
        f"{label} ({status}): {method} {url}",
        status_code=status,
        category=classify_http_status(status),
        response_body=response_body,
        response_headers=response_headers,
        request_method=method,
        request_url=url,
        request_headers=request_headers,
    )


class SubmissionApiClient:
    """
    Async client for the Submission API and the Challenge API.

    One attempt per call with a bounded total timeout. Non-2xx responses and
    transport failures raise SubmissionApiError.
    """

    def __init__(
        self,
        base_url: str,
        challenge_info_url: str,
        timeout_seconds: float = 10,
    ):
        self.base_url = base_url.rstrip("/") if base_url else ""

        if not self.base_url:
            raise ValueError(
                "SubmissionApiClient requires 'base_url'. "
                "Set SUBMISSION_API_URL environment variable or configure submission_api.url in config."
            )

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"SubmissionApiClient base_url must start with http:// or https://, got: {self.base_url!r}. "
                "Set SUBMISSION_API_URL environment variable or configure submission_api.url in config."
            )

        if not challenge_info_url or "{cid}" not in challenge_info_url:
            raise ValueError("SubmissionApiClient requires a challenge info URL containing '{cid}'")

        self.challenge_info_url = challenge_info_url
        self.timeout_seconds = timeout_seconds
        self._session: aiohttp.ClientSession | None = None
        self._closed = False

        logger.info(
            "SubmissionApiClient initialized",
            extra={
                "http_url": self.base_url,
                "timeout_seconds": self.timeout_seconds,
            },
        )

    async def __aenter__(self) -> "SubmissionApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> None:
        if self._closed:
            raise RuntimeError("SubmissionApiClient is closed, cannot create new session")
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})

    async def close(self) -> None:
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> Any:
        await self._ensure_session()
        request_headers = dict(headers or {})

        logger.debug(
            "API request starting",
            extra={"http_method": method, "http_url": url},
        )

        start_time = asyncio.get_event_loop().time()
        try:
            async with self._session.request(
                method,
                url,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                duration = asyncio.get_event_loop().time() - start_time

                if not 200 <= response.status < 300:
                    try:
                        body = await response.text()
                    except (aiohttp.ClientError, UnicodeDecodeError):
                        body = "<unable to read response body>"
                    raise classify_api_error(
                        response.status,
                        method,
                        url,
                        response_body=body[:2000] if body else body,
                        response_headers=dict(response.headers),
                        request_headers=request_headers,
                    )

                data = await response.json(content_type=None)
                logger.debug(
                    "API request succeeded",
                    extra={
                        "http_method": method,
                        "http_url": url,
                        "http_status": response.status,
                        "duration_ms": round(duration * 1000, 1),
                    },
                )
                return data

        except TimeoutError as e:
            raise SubmissionApiError(
                f"Timeout after {self.timeout_seconds}s: {method} {url}",
                category=ErrorCategory.TRANSIENT,
                request_method=method,
                request_url=url,
                request_headers=request_headers,
                cause=e,
            ) from e

        except aiohttp.ClientError as e:
            raise SubmissionApiError(
                f"Connection error: {e}",
                category=ErrorCategory.TRANSIENT,
                request_method=method,
                request_url=url,
                request_headers=request_headers,
                cause=e,
            ) from e

    async def get_submission(self, submission_id: Any, token: str | None = None) -> dict[str, Any]:
        """GET /submissions/{id}, with a bearer token when one is given."""
        headers = {"Authorization": f"Bearer {token}"} if token else None
        return await self._request("GET", f"{self.base_url}/submissions/{submission_id}", headers=headers)

    def challenge_url(self, challenge_id: Any) -> str:
        return self.challenge_info_url.replace("{cid}", str(challenge_id))

    async def get_challenge(self, challenge_id: Any) -> dict[str, Any]:
        """GET the challenge info document for a challenge id."""
        return await self._request("GET", self.challenge_url(challenge_id))
