"""
Exception hierarchy for the processor.

Every failure raised by processor code carries an ErrorCategory so the
router and the logs can tell a broken message from a broken dependency.
"""

# ErrorCategory lives in core.types so enum identity is shared across modules
from core.types import ErrorCategory


class ProcessorError(Exception):
    """
    Base exception for processor failures.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether replaying the same message could succeed."""
        return self.category is not ErrorCategory.PERMANENT

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} | Caused by: {self.cause}"
        return self.message


class AuthError(ProcessorError):
    """Credentials were rejected or could not be obtained."""

    category = ErrorCategory.AUTH


class TransientError(ProcessorError):
    """Dependency failure that may clear up on its own (timeouts, 5xx, store outages)."""

    category = ErrorCategory.TRANSIENT


class PermanentError(ProcessorError):
    """Failure that replaying the same message will not fix."""

    category = ErrorCategory.PERMANENT


def classify_http_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status from an upstream API onto an error category."""
    if status_code in (401, 403):
        return ErrorCategory.AUTH
    if status_code in (408, 429) or status_code >= 500:
        return ErrorCategory.TRANSIENT
    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT
    return ErrorCategory.UNKNOWN
