"""
Routing engine for submission lifecycle events.

Runs the ordered filter cascade (topic, originator, resource, subTrack) and
branches on the payload resource through the handler registry. String checks
run before the network-bound subTrack lookup.
"""

import logging
import time
from typing import Any, Optional

from config.config import ProcessorConfig
from core.logging import EventLogContext, get_logger, log_exception, log_with_context
from mm_processor.common.metrics import (
    processing_duration_seconds,
    record_mutation,
    record_outcome,
)
from mm_processor.submission.dispatcher import ScoreMutationDispatcher
from mm_processor.submission.enrichment import EnrichmentClient
from mm_processor.submission.handlers import HandlerRegistry, get_handler_registry
from mm_processor.submission.schemas.events import Resource, SubmissionEvent
from mm_processor.submission.schemas.results import DropReason, RoutingOutcome
from mm_processor.submission.validation import validate_event

logger = get_logger(__name__)


class SubmissionEventRouter:
    """
    Decides, per message, whether it is relevant and which mutation it triggers.

    Stateless across messages: every call validates, enriches and dispatches
    from scratch, so replaying a message repeats its mutation.

    Args:
        config: Processor configuration (topics, originator, allow-sets)
        enrichment: Enrichment client for subTrack and submission lookups
        dispatcher: Score mutation dispatcher
        registry: Handler registry (defaults to the global one)
    """

    def __init__(
        self,
        config: ProcessorConfig,
        enrichment: EnrichmentClient,
        dispatcher: ScoreMutationDispatcher,
        registry: Optional[HandlerRegistry] = None,
    ):
        self.config = config
        self.enrichment = enrichment
        self.dispatcher = dispatcher
        self.registry = registry or get_handler_registry()
        self._topics = frozenset(config.topics)
        self._sub_tracks = frozenset(config.challenge_subtracks)

    def _metric_topic(self, topic: str) -> str:
        # Topics come from the message body; keep label values bounded
        return topic if topic in self._topics else "other"

    def _drop(self, reason: DropReason, msg: str, **context: Any) -> RoutingOutcome:
        log_with_context(logger, logging.DEBUG, msg, drop_reason=reason.value, **context)
        return RoutingOutcome.dropped(reason)

    async def _route(self, event: SubmissionEvent) -> RoutingOutcome:
        if event.topic not in self._topics:
            return self._drop(DropReason.TOPIC, "Skipped event from topic", topic=event.topic)

        if event.originator != self.config.new_submission_originator:
            return self._drop(
                DropReason.ORIGINATOR,
                "Skipped event from originator",
                originator=event.originator,
            )

        if event.resource == Resource.SUBMISSION.value:
            return self._drop(
                DropReason.SUBMISSION_RESOURCE,
                "Skipped event from resource",
                resource=event.resource,
            )

        sub_track = await self.enrichment.resolve_subtrack(event.submission_id)
        if not sub_track:
            return self._drop(DropReason.SUB_TRACK_UNRESOLVED, "Skipped event with unresolved subTrack")
        if sub_track not in self._sub_tracks:
            return self._drop(DropReason.SUB_TRACK, "Skipped event from subTrack", sub_track=sub_track)

        handler_class = self.registry.get_handler_class(event.resource)
        if handler_class is None:
            return self._drop(DropReason.NO_HANDLER, "No handler for resource", resource=event.resource)

        handler = handler_class(self.config, self.enrichment, self.dispatcher)
        return await handler.handle_event(event)

    async def process(self, value: Any) -> RoutingOutcome:
        """
        Route one raw message value. Never raises; faults are logged here
        with their traceback.

        Returns:
            Dropped, mutated, or faulted (with the captured error) outcome
        """
        start = time.perf_counter()
        validation = validate_event(value)
        if not validation.is_valid:
            outcome = RoutingOutcome.dropped(validation.reason)
            record_outcome(outcome.kind.value, outcome.label)
            return outcome

        event = validation.event
        submission_id = event.submission_id
        with EventLogContext(
            submission_id=str(submission_id) if submission_id is not None else None,
            resource=event.resource,
        ):
            try:
                outcome = await self._route(event)
            except Exception as e:
                log_exception(logger, e, "Event routing faulted", topic=event.topic)
                outcome = RoutingOutcome.faulted(e)

            duration = time.perf_counter() - start
            processing_duration_seconds.labels(topic=self._metric_topic(event.topic)).observe(duration)
            record_outcome(outcome.kind.value, outcome.label)
            if outcome.is_mutated:
                record_mutation(outcome.mutation.value)
                log_with_context(
                    logger,
                    logging.INFO,
                    "Event routed to legacy store",
                    mutation=outcome.mutation.value,
                    duration_ms=round(duration * 1000, 1),
                )
        return outcome

    async def handle(self, value: Any) -> RoutingOutcome:
        """Route one message, re-raising the error of a faulted outcome (already logged)."""
        outcome = await self.process(value)
        if outcome.is_faulted:
            raise outcome.error
        return outcome
