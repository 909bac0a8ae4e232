"""
Score worker: consumes submission notifications and routes them into the
legacy store.

Flow:
    submission.notification.{create,update} -> MessageConsumer ->
    SubmissionEventRouter.process -> ScoreMutationDispatcher -> legacy store

Faults (missing legacy submission id, store failures) are logged once by the
router with their traceback and the offset is committed anyway; no retry
topic is involved.
"""

import asyncio
import logging
from typing import Optional

from config.config import ProcessorConfig
from core.logging import get_logger, log_startup_banner, log_with_context, set_log_context
from core.oauth2 import MachineTokenClient
from core.types import MachineTokenProvider
from core.utils import generate_worker_id
from mm_processor.common.consumer import MessageConsumer
from mm_processor.common.types import PipelineMessage
from mm_processor.legacy.store import LegacyStore, SqlLegacyStore
from mm_processor.submission.api_client import SubmissionApiClient
from mm_processor.submission.routing import SubmissionEventRouter
from mm_processor.submission.service import build_router

logger = get_logger(__name__)

WORKER_NAME = "score_worker"


class ScoreWorker:
    """
    Long-running worker owning the consumer, HTTP session, token cache and
    store engine for the lifetime of the process.

    Args:
        config: Processor configuration
        store: Legacy store (defaults to SqlLegacyStore on LEGACY_DB_URL)
        token_provider: Machine token provider (defaults to an Auth0 client
            when Auth0 is fully configured)
        instance_id: Worker instance id used in logs
    """

    def __init__(
        self,
        config: ProcessorConfig,
        store: Optional[LegacyStore] = None,
        token_provider: Optional[MachineTokenProvider] = None,
        instance_id: Optional[str] = None,
    ):
        self.config = config
        self.instance_id = instance_id or generate_worker_id(WORKER_NAME)
        self.store = store
        self.token_provider = token_provider

        self.api_client: Optional[SubmissionApiClient] = None
        self.router: Optional[SubmissionEventRouter] = None
        self.consumer: Optional[MessageConsumer] = None
        self._owned_token_client: Optional[MachineTokenClient] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _build_token_provider(self) -> Optional[MachineTokenProvider]:
        if self.token_provider is not None:
            return self.token_provider
        if not self.config.m2m_enabled:
            return None
        self._owned_token_client = MachineTokenClient(
            auth0_url=self.config.auth0_url,
            audience=self.config.auth0_audience,
            cache_time_seconds=self.config.token_cache_time_seconds,
            proxy_url=self.config.auth0_proxy_server_url or None,
        )
        return self._owned_token_client

    async def setup(self) -> None:
        """Create the long-lived collaborators and the router."""
        set_log_context(worker_id=self.instance_id, stage=WORKER_NAME)

        if self.store is None:
            self.store = SqlLegacyStore(self.config.legacy_db_url)

        self.api_client = SubmissionApiClient(
            self.config.submission_api_url,
            self.config.challenge_info_api,
            timeout_seconds=self.config.submission_timeout_seconds,
        )
        self.router = build_router(
            self.config,
            self.api_client,
            self.store,
            m2m=self._build_token_provider(),
        )
        self.consumer = MessageConsumer(
            self.config,
            topics=self.config.topics,
            message_handler=self.handle_message,
        )

    async def handle_message(self, message: PipelineMessage) -> None:
        """Route one record. The router logs faults, so the offset commits regardless."""
        outcome = await self.router.process(message.value)
        log_with_context(
            logger,
            logging.DEBUG,
            "Message processed",
            outcome=outcome.kind.value,
            drop_reason=outcome.reason.value if outcome.reason else None,
            mutation=outcome.mutation.value if outcome.mutation else None,
        )

    async def start(self) -> None:
        """Run until stop() is called or the consumer task ends."""
        if self.router is None:
            await self.setup()

        log_startup_banner(
            logger,
            "Legacy MM Score Worker",
            worker_id=self.instance_id,
            topics=", ".join(self.config.topics),
            group_id=self.config.kafka_group_id,
            originator=self.config.new_submission_originator,
            sub_tracks=", ".join(self.config.challenge_subtracks),
            metrics_port=self.config.metrics_port,
        )

        self._running = True
        try:
            await self.consumer.start()
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop consuming and release every owned resource."""
        self._running = False
        if self.consumer is not None:
            await self.consumer.stop()
        if self.api_client is not None:
            await self.api_client.close()
        if self._owned_token_client is not None:
            await self._owned_token_client.close()
        if self.store is not None:
            await self.store.close()
        logger.info("Score worker stopped")


async def run_score_worker(config: ProcessorConfig, shutdown_event: asyncio.Event) -> None:
    """Run a ScoreWorker until the shutdown event is set."""
    worker = ScoreWorker(config)
    await worker.setup()

    worker_task = asyncio.create_task(worker.start(), name=WORKER_NAME)
    shutdown_task = asyncio.create_task(shutdown_event.wait(), name="shutdown")
    try:
        done, _ = await asyncio.wait(
            {worker_task, shutdown_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if worker_task in done:
            # Surface consumer failures
            worker_task.result()
    finally:
        shutdown_task.cancel()
        await worker.stop()
        if not worker_task.done():
            worker_task.cancel()
        await asyncio.gather(worker_task, return_exceptions=True)
