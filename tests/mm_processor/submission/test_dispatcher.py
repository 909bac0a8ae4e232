"""Tests for the score mutation dispatcher."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from mm_processor.legacy.store import LegacyStore, LegacyStoreError
from mm_processor.submission.dispatcher import ScoreMutationDispatcher
from mm_processor.submission.validation import parse_event


@pytest.fixture
def store():
    store = MagicMock(spec=LegacyStore)
    store.update_review_score = AsyncMock()
    store.update_final_score = AsyncMock()
    return store


class TestReviewScoreUpdate:

    async def test_marshals_review_payload(self, store, make_event, review_payload):
        event = parse_event(json.dumps(make_event(review_payload)))
        dispatcher = ScoreMutationDispatcher(store)

        update = await dispatcher.update_review_score(event, 9001)

        store.update_review_score.assert_awaited_once_with(update)
        assert update.review_id == review_payload["id"]
        assert update.legacy_submission_id == 9001
        assert update.reviewer_id == review_payload["reviewerId"]
        assert update.test_type == "provisional"

    async def test_optional_fields_absent(self, store, make_event):
        event = parse_event(json.dumps(make_event({"resource": "review", "id": 12, "score": 40})))

        update = await ScoreMutationDispatcher(store).update_review_score(event, 5)

        assert update.review_id == "12"
        assert update.submission_id is None
        assert update.test_type is None
        assert update.score_card_id is None

    def test_rejects_non_review_payload(self, store, make_event, summation_payload):
        event = parse_event(json.dumps(make_event(summation_payload)))

        with pytest.raises(TypeError):
            ScoreMutationDispatcher.build_review_update(event, 1)


class TestFinalScoreUpdate:

    async def test_forwards_to_store(self, store):
        await ScoreMutationDispatcher(store).update_final_score(9001, 87.5)

        store.update_final_score.assert_awaited_once_with(9001, 87.5, "finalScore")

    async def test_store_errors_propagate(self, store):
        store.update_final_score.side_effect = LegacyStoreError("db down")

        with pytest.raises(LegacyStoreError):
            await ScoreMutationDispatcher(store).update_final_score(9001, 87.5)
