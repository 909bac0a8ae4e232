"""
Collaborator-style entry point for routing a single message.

Builds a router around the supplied store and token provider, routes one
value and tears the HTTP session down again. Long-running consumers should
build a SubmissionEventRouter once instead (see workers.score_worker).
"""

from typing import Any, Optional

from config.config import ProcessorConfig, get_config
from core.types import MachineTokenProvider
from mm_processor.legacy.store import LegacyStore
from mm_processor.submission.api_client import SubmissionApiClient
from mm_processor.submission.dispatcher import ScoreMutationDispatcher
from mm_processor.submission.enrichment import EnrichmentClient
from mm_processor.submission.routing import SubmissionEventRouter
from mm_processor.submission.schemas.results import RoutingOutcome


def build_router(
    config: ProcessorConfig,
    api_client: SubmissionApiClient,
    store: LegacyStore,
    m2m: Optional[MachineTokenProvider] = None,
) -> SubmissionEventRouter:
    """Wire enrichment, dispatcher and router around shared collaborators."""
    enrichment = EnrichmentClient(
        api_client,
        token_provider=m2m,
        client_id=config.auth0_client_id,
        client_secret=config.auth0_client_secret,
    )
    return SubmissionEventRouter(config, enrichment, ScoreMutationDispatcher(store))


async def handle(
    value: Any,
    store: LegacyStore,
    m2m: Optional[MachineTokenProvider] = None,
    id_upload_gen: Any = None,
    id_submission_gen: Any = None,
    config: Optional[ProcessorConfig] = None,
) -> RoutingOutcome:
    """
    Route one raw message value against the legacy store.

    ``id_upload_gen`` and ``id_submission_gen`` are accepted so callers can
    share one signature with the submission-resource processor; the review
    paths never allocate legacy ids.

    Raises:
        LegacySubmissionNotFoundError: If a review-family event has no legacy id
        LegacyStoreError: If the store mutation fails
    """
    config = config or get_config()
    async with SubmissionApiClient(
        config.submission_api_url,
        config.challenge_info_api,
        timeout_seconds=config.submission_timeout_seconds,
    ) as api_client:
        router = build_router(config, api_client, store, m2m=m2m)
        return await router.handle(value)
