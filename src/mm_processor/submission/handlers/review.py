"""
Review event handler.

Handles: review
"""

import logging

from core.logging import get_logger, log_with_context
from mm_processor.submission.handlers.base import EventHandler, register_handler
from mm_processor.submission.schemas.events import Resource, SubmissionEvent
from mm_processor.submission.schemas.results import DropReason, MutationKind, RoutingOutcome

logger = get_logger(__name__)


@register_handler
class ReviewHandler(EventHandler):
    """
    Handler for review events.

    Writes the review score for review types in PAYLOAD_TYPES. The legacy
    submission id comes from the payload when present, else from the
    submission record.
    """

    resources = [Resource.REVIEW.value]

    async def handle_event(self, event: SubmissionEvent) -> RoutingOutcome:
        payload = event.payload

        if payload.type_id not in self.config.payload_type_ids:
            log_with_context(
                logger,
                logging.DEBUG,
                "Skipped invalid typeId",
                handler_name=self.name,
                type_id=payload.type_id,
                drop_reason=DropReason.INVALID_TYPE_ID.value,
            )
            return RoutingOutcome.dropped(DropReason.INVALID_TYPE_ID)

        if payload.score is None:
            log_with_context(
                logger,
                logging.DEBUG,
                "Skipped review without score",
                handler_name=self.name,
                drop_reason=DropReason.MISSING_SCORE.value,
            )
            return RoutingOutcome.dropped(DropReason.MISSING_SCORE)

        legacy_submission_id = payload.legacy_submission_id
        if legacy_submission_id is None:
            legacy_submission_id = await self.fetch_legacy_submission_id(payload.submission_id)

        await self.dispatcher.update_review_score(event, legacy_submission_id)
        return RoutingOutcome.mutated(MutationKind.REVIEW_SCORE)
