"""
pytest configuration for processor tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from config.config import ProcessorConfig, reset_config  # noqa: E402
from core.logging.context import clear_log_context  # noqa: E402

REVIEW_TYPE_ID = "bcf2b43b-20df-44d1-afd3-7fc9798dfcae"


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Reset config singleton and log context between tests."""
    reset_config()
    clear_log_context()
    yield
    reset_config()
    clear_log_context()


@pytest.fixture
def processor_config() -> ProcessorConfig:
    """Processor config with the standard marathon-match defaults."""
    return ProcessorConfig(
        submission_api_url="http://submission.test/api/v5",
        challenge_info_api="http://challenge.test/v3/challenges?filter=id={cid}",
        submission_timeout_ms=5000,
    )


@pytest.fixture
def make_event():
    """Factory for raw submission event dicts."""

    def _make(
        payload: dict,
        topic: str = "submission.notification.create",
        originator: str = "submission-api",
    ) -> dict:
        return {
            "topic": topic,
            "originator": originator,
            "timestamp": "2018-08-06T15:46:05.575Z",
            "mime-type": "application/json",
            "payload": payload,
        }

    return _make


@pytest.fixture
def review_payload() -> dict:
    return {
        "resource": "review",
        "id": "d34d4180-65aa-42ec-a945-5fd21dec0502",
        "score": 92.5,
        "typeId": REVIEW_TYPE_ID,
        "reviewerId": "c23a4180-65aa-42ec-a945-5fd21dec0503",
        "scoreCardId": 30001850,
        "submissionId": "a12a4180-65aa-42ec-a945-5fd21dec0501",
        "status": "queued",
        "metadata": {"testType": "provisional"},
    }


@pytest.fixture
def summation_payload() -> dict:
    return {
        "resource": "reviewSummation",
        "id": "e45a4180-65aa-42ec-a945-5fd21dec0504",
        "submissionId": "a12a4180-65aa-42ec-a945-5fd21dec0501",
        "aggregateScore": 87.5,
        "scoreCardId": 30001850,
        "isPassing": True,
    }
