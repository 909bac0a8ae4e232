"""
Review summation event handler.

Handles: reviewSummation
"""

import logging

from core.logging import get_logger, log_with_context
from mm_processor.submission.handlers.base import EventHandler, register_handler
from mm_processor.submission.schemas.events import Resource, SubmissionEvent
from mm_processor.submission.schemas.results import DropReason, MutationKind, RoutingOutcome

logger = get_logger(__name__)

FINAL_SCORE_FIELD = "finalScore"


@register_handler
class ReviewSummationHandler(EventHandler):
    """
    Handler for review summation events.

    Only summations announced on the new-submission topic are written. The
    aggregate score lands in the legacy submission's final score; a missing
    legacy submission id is a fault, not a drop.
    """

    resources = [Resource.REVIEW_SUMMATION.value]

    async def handle_event(self, event: SubmissionEvent) -> RoutingOutcome:
        payload = event.payload

        if event.topic != self.config.new_submission_topic:
            log_with_context(
                logger,
                logging.DEBUG,
                "Skipped reviewSummation outside the new submission topic",
                handler_name=self.name,
                topic=event.topic,
                drop_reason=DropReason.NOT_NEW_SUBMISSION_TOPIC.value,
            )
            return RoutingOutcome.dropped(DropReason.NOT_NEW_SUBMISSION_TOPIC)

        if payload.aggregate_score is None:
            log_with_context(
                logger,
                logging.DEBUG,
                "Skipped reviewSummation without aggregateScore",
                handler_name=self.name,
                drop_reason=DropReason.MISSING_AGGREGATE_SCORE.value,
            )
            return RoutingOutcome.dropped(DropReason.MISSING_AGGREGATE_SCORE)

        legacy_submission_id = await self.fetch_legacy_submission_id(payload.submission_id)

        await self.dispatcher.update_final_score(
            legacy_submission_id,
            payload.aggregate_score,
            FINAL_SCORE_FIELD,
        )
        return RoutingOutcome.mutated(MutationKind.FINAL_SCORE)
