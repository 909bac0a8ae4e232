"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_worker_id: ContextVar[str] = ContextVar("worker_id", default="")
_stage_name: ContextVar[str] = ContextVar("stage_name", default="")
_submission_id: ContextVar[str] = ContextVar("submission_id", default="")
_resource: ContextVar[str] = ContextVar("resource", default="")


def set_log_context(
    worker_id: Optional[str] = None,
    stage: Optional[str] = None,
    submission_id: Optional[str] = None,
    resource: Optional[str] = None,
) -> None:
    if worker_id is not None:
        _worker_id.set(worker_id)
    if stage is not None:
        _stage_name.set(stage)
    if submission_id is not None:
        _submission_id.set(submission_id)
    if resource is not None:
        _resource.set(resource)


def get_log_context() -> Dict[str, str]:
    return {
        "worker_id": _worker_id.get(),
        "stage": _stage_name.get(),
        "submission_id": _submission_id.get(),
        "resource": _resource.get(),
    }


def clear_log_context() -> None:
    _worker_id.set("")
    _stage_name.set("")
    _submission_id.set("")
    _resource.set("")


class EventLogContext:
    """
    Context manager binding the identifiers of the event being routed.

    Usage:
        with EventLogContext(submission_id="42", resource="review"):
            # All logs in this block carry submission_id and resource
            await route(event)
    """

    def __init__(self, submission_id: Optional[str] = None, resource: Optional[str] = None):
        self.new_context = {"submission_id": submission_id, "resource": resource}
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "EventLogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(
            submission_id=self.old_context.get("submission_id", ""),
            resource=self.old_context.get("resource", ""),
        )
        return False
