"""Shared collaborators for handler tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def enrichment():
    enrichment = MagicMock()
    enrichment.fetch_submission = AsyncMock(return_value={"legacySubmissionId": "9001"})
    return enrichment


@pytest.fixture
def dispatcher():
    dispatcher = MagicMock()
    dispatcher.update_review_score = AsyncMock()
    dispatcher.update_final_score = AsyncMock()
    return dispatcher
