"""Tests for the log line JSON serializer."""

import json
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from core.utils.json_serializers import json_serializer
from mm_processor.submission.schemas.results import DropReason


def test_serializes_log_values():
    payload = {
        "timestamp": datetime(2018, 8, 6, 15, 46, 5, tzinfo=UTC),
        "day": date(2018, 8, 6),
        "score": Decimal("87.5"),
        "submission_id": UUID("a12a4180-65aa-42ec-a945-5fd21dec0501"),
        "log_dir": Path("/var/log/mm"),
        "drop_reason": DropReason.SUB_TRACK,
        "other": object,
    }

    decoded = json.loads(json.dumps(payload, default=json_serializer))

    assert decoded["timestamp"] == "2018-08-06T15:46:05+00:00"
    assert decoded["day"] == "2018-08-06"
    assert decoded["score"] == 87.5
    assert decoded["submission_id"] == "a12a4180-65aa-42ec-a945-5fd21dec0501"
    assert decoded["log_dir"] == "/var/log/mm"
    assert decoded["drop_reason"] == "sub_track"
    assert decoded["other"] == "<class 'object'>"
