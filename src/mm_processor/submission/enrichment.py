"""
Enrichment client: submission record and challenge subTrack lookups.

Two chained outbound calls resolve a submission's challenge subTrack. Every
failure is logged with diagnostics and turned into ``None``; enrichment never
faults the routing pass.
"""

import logging
from typing import Any, Optional

from core.logging import get_logger, log_exception, log_with_context
from core.types import MachineTokenProvider
from mm_processor.submission.api_client import SubmissionApiClient, SubmissionApiError
from mm_processor.common.utils import get_path

logger = get_logger(__name__)

SUB_TRACK_PATH = "result.content[0].subTrack"


class EnrichmentClient:
    """Fetches submission records and challenge subTracks.

    Args:
        api_client: Submission/Challenge API client
        token_provider: Optional machine token provider; when set, Submission
            API calls carry a bearer token
        client_id: Auth0 client id for machine tokens
        client_secret: Auth0 client secret for machine tokens
    """

    def __init__(
        self,
        api_client: SubmissionApiClient,
        token_provider: Optional[MachineTokenProvider] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ):
        self.api_client = api_client
        self.token_provider = token_provider
        self.client_id = client_id
        self.client_secret = client_secret

    async def _token(self) -> Optional[str]:
        if self.token_provider is None:
            return None
        return await self.token_provider.get_machine_token(self.client_id, self.client_secret)

    def _log_api_error(self, error: SubmissionApiError, msg: str, **context: Any) -> None:
        if error.has_response:
            log_with_context(
                logger,
                logging.ERROR,
                msg,
                http_status=error.status_code,
                response_body=error.response_body,
                response_headers=error.response_headers,
                error_category=error.category.value,
                **context,
            )
        else:
            log_with_context(
                logger,
                logging.ERROR,
                msg,
                http_method=error.request_method,
                http_url=error.request_url,
                request_headers=error.request_headers,
                error_message=str(error),
                error_category=error.category.value,
                **context,
            )

    async def fetch_submission(self, submission_id: Any) -> Optional[dict[str, Any]]:
        """Fetch a submission record, or None when it cannot be retrieved."""
        if submission_id is None:
            logger.debug("No submission id to fetch")
            return None

        try:
            token = await self._token()
            record = await self.api_client.get_submission(submission_id, token=token)
        except SubmissionApiError as e:
            self._log_api_error(e, "Submission API request failed", submission_id=str(submission_id))
            return None
        except Exception as e:
            log_exception(logger, e, "Failed to fetch submission", submission_id=str(submission_id))
            return None

        if not isinstance(record, dict):
            log_with_context(
                logger,
                logging.ERROR,
                "Submission API returned a non-object body",
                submission_id=str(submission_id),
            )
            return None
        return record

    async def fetch_sub_track(self, challenge_id: Any) -> Optional[str]:
        """Fetch a challenge's subTrack, or None when unavailable."""
        try:
            data = await self.api_client.get_challenge(challenge_id)
        except SubmissionApiError as e:
            self._log_api_error(e, "Challenge API request failed", challenge_id=str(challenge_id))
            return None
        except Exception as e:
            log_exception(logger, e, "Failed to fetch challenge", challenge_id=str(challenge_id))
            return None

        sub_track = get_path(data, SUB_TRACK_PATH)
        return sub_track if isinstance(sub_track, str) else None

    async def resolve_subtrack(self, submission_id: Any) -> Optional[str]:
        """Resolve the subTrack of the challenge owning a submission."""
        record = await self.fetch_submission(submission_id)
        challenge_id = get_path(record, "challengeId")
        if challenge_id is None:
            log_with_context(
                logger,
                logging.DEBUG,
                "Submission has no challenge id",
                submission_id=str(submission_id) if submission_id is not None else None,
            )
            return None

        sub_track = await self.fetch_sub_track(challenge_id)
        log_with_context(
            logger,
            logging.DEBUG,
            "Resolved challenge subTrack",
            submission_id=str(submission_id),
            challenge_id=str(challenge_id),
            sub_track=sub_track,
        )
        return sub_track
