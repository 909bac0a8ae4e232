"""Exception hierarchy and HTTP status classification."""

from core.errors.exceptions import (
    AuthError,
    ErrorCategory,
    PermanentError,
    ProcessorError,
    TransientError,
    classify_http_status,
)

__all__ = [
    "ErrorCategory",
    "ProcessorError",
    "AuthError",
    "TransientError",
    "PermanentError",
    "classify_http_status",
]
