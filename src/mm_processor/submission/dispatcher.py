"""Score mutation dispatcher: marshals routed events into legacy store writes."""

import logging

from core.logging import get_logger, log_with_context
from mm_processor.legacy.store import LegacyStore
from mm_processor.common.utils import safe_str_id
from mm_processor.submission.schemas.events import ReviewPayload, SubmissionEvent
from mm_processor.submission.schemas.results import ReviewScoreUpdate

logger = get_logger(__name__)


class ScoreMutationDispatcher:
    """Invokes the legacy store update matching the routed event.

    Store failures propagate to the caller; nothing is retried.
    """

    def __init__(self, store: LegacyStore):
        self.store = store

    @staticmethod
    def build_review_update(event: SubmissionEvent, legacy_submission_id: int) -> ReviewScoreUpdate:
        payload = event.payload
        if not isinstance(payload, ReviewPayload):
            raise TypeError(f"Expected a review payload, got resource={payload.resource!r}")
        return ReviewScoreUpdate(
            review_id=str(payload.id),
            submission_id=safe_str_id(payload.submission_id),
            legacy_submission_id=legacy_submission_id,
            score=payload.score,
            type_id=payload.type_id,
            test_type=payload.test_type,
            reviewer_id=safe_str_id(payload.reviewer_id),
            score_card_id=safe_str_id(payload.score_card_id),
        )

    async def update_review_score(self, event: SubmissionEvent, legacy_submission_id: int) -> ReviewScoreUpdate:
        update = self.build_review_update(event, legacy_submission_id)
        log_with_context(
            logger,
            logging.DEBUG,
            "Dispatching review score update",
            submission_id=update.submission_id,
            legacy_submission_id=legacy_submission_id,
            score=update.score,
            type_id=update.type_id,
            test_type=update.test_type,
        )
        await self.store.update_review_score(update)
        return update

    async def update_final_score(
        self,
        legacy_submission_id: int,
        score: float,
        field_name: str = "finalScore",
    ) -> None:
        log_with_context(
            logger,
            logging.DEBUG,
            "Dispatching final score update",
            legacy_submission_id=legacy_submission_id,
            score=score,
            field_name=field_name,
        )
        await self.store.update_final_score(legacy_submission_id, score, field_name)
