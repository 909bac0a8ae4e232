"""Tests for the processor exception hierarchy."""

import pytest

from core.errors import (
    AuthError,
    ErrorCategory,
    PermanentError,
    ProcessorError,
    TransientError,
    classify_http_status,
)


class TestProcessorError:

    def test_defaults(self):
        error = ProcessorError("something failed")

        assert error.message == "something failed"
        assert error.category == ErrorCategory.UNKNOWN
        assert error.context == {}
        assert error.cause is None
        assert str(error) == "something failed"

    def test_wraps_cause(self):
        cause = ConnectionResetError("peer reset")
        error = TransientError("Store update failed", cause=cause, context={"column": "final_score"})

        assert str(error) == "Store update failed | Caused by: peer reset"
        assert error.context == {"column": "final_score"}

    @pytest.mark.parametrize(
        "error_class,category,retryable",
        [
            (TransientError, ErrorCategory.TRANSIENT, True),
            (AuthError, ErrorCategory.AUTH, True),
            (PermanentError, ErrorCategory.PERMANENT, False),
            (ProcessorError, ErrorCategory.UNKNOWN, True),
        ],
    )
    def test_categories(self, error_class, category, retryable):
        error = error_class("x")

        assert isinstance(error, ProcessorError)
        assert error.category == category
        assert error.is_retryable is retryable


class TestClassifyHttpStatus:

    @pytest.mark.parametrize(
        "status,category",
        [
            (401, ErrorCategory.AUTH),
            (403, ErrorCategory.AUTH),
            (404, ErrorCategory.PERMANENT),
            (422, ErrorCategory.PERMANENT),
            (408, ErrorCategory.TRANSIENT),
            (429, ErrorCategory.TRANSIENT),
            (500, ErrorCategory.TRANSIENT),
            (503, ErrorCategory.TRANSIENT),
            (302, ErrorCategory.UNKNOWN),
        ],
    )
    def test_status(self, status, category):
        assert classify_http_status(status) == category
