"""
Submission event parsing and schema validation.

Turns a raw message value into a SubmissionEvent. Every rejection is a
debug-level drop: empty input, malformed JSON and schema violations never
raise past this module.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from core.logging import get_logger, log_with_context
from mm_processor.submission.schemas.events import SubmissionEvent
from mm_processor.submission.schemas.results import DropReason

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """Parsed event, or the reason it was rejected."""

    event: Optional[SubmissionEvent] = None
    reason: Optional[DropReason] = None
    detail: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.event is not None


def format_validation_errors(error: ValidationError) -> str:
    """Collapse every field error into one comma-joined diagnostic."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


def _decode(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _reject_constant(token: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {token}")


def validate_event(value: Any) -> ValidationOutcome:
    """
    Parse and validate a raw message value.

    Args:
        value: Raw message value (str or bytes)

    Returns:
        ValidationOutcome carrying either the event or the drop reason
    """
    text = _decode(value)
    if text is None or not text.strip():
        logger.debug("Skipped null or empty event")
        return ValidationOutcome(reason=DropReason.EMPTY)

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        log_with_context(
            logger,
            logging.DEBUG,
            "Skipped non well-formed JSON message",
            error_message=str(e)[:200],
            message_preview=text[:200],
        )
        return ValidationOutcome(reason=DropReason.MALFORMED_JSON, detail=str(e))

    if data is None:
        logger.debug("Skipped null or empty event")
        return ValidationOutcome(reason=DropReason.EMPTY)

    try:
        event = SubmissionEvent.model_validate(data)
    except ValidationError as e:
        detail = format_validation_errors(e)
        log_with_context(
            logger,
            logging.DEBUG,
            "Skipped invalid event",
            validation_errors=detail,
        )
        return ValidationOutcome(reason=DropReason.INVALID_EVENT, detail=detail)

    return ValidationOutcome(event=event)


def parse_event(value: Any) -> Optional[SubmissionEvent]:
    """Return the validated event, or None when the message must be dropped."""
    return validate_event(value).event
