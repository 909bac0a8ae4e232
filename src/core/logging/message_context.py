"""Message transport context variables for structured logging."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

_message_context: ContextVar[Dict[str, Any]] = ContextVar("message_context", default={})


def get_message_context() -> Dict[str, Any]:
    """
    Get current message transport logging context.

    Returns:
        Dictionary with message_topic, message_partition, message_offset and,
        when set, message_key and message_consumer_group
    """
    return dict(_message_context.get())


@contextmanager
def message_log_context(
    topic: Optional[str] = None,
    partition: Optional[int] = None,
    offset: Optional[int] = None,
    key: Optional[str] = None,
    consumer_group: Optional[str] = None,
) -> Iterator[Dict[str, Any]]:
    """
    Bind transport metadata of the record being processed.

    Usage:
        with message_log_context(topic="submission.notification.create", partition=0, offset=12):
            await handler(value)
    """
    context = {
        "message_topic": topic,
        "message_partition": partition,
        "message_offset": offset,
        "message_key": key,
        "message_consumer_group": consumer_group,
    }
    context = {k: v for k, v in context.items() if v is not None}
    token = _message_context.set(context)
    try:
        yield context
    finally:
        _message_context.reset(token)
