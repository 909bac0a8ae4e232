"""Tests for logging helper functions."""

import logging

from core.errors.exceptions import PermanentError
from core.logging.utilities import log_exception, log_startup_banner, log_with_context

LOGGER_NAME = "tests.logging.utilities"


class TestLogWithContext:

    def test_fields_become_record_attributes(self, caplog):
        logger = logging.getLogger(LOGGER_NAME)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            log_with_context(logger, logging.DEBUG, "Skipped event from topic", topic="other", drop_reason="topic")

        record = caplog.records[0]
        assert record.getMessage() == "Skipped event from topic"
        assert record.topic == "other"
        assert record.drop_reason == "topic"

    def test_reserved_keys_are_dropped(self, caplog):
        logger = logging.getLogger(LOGGER_NAME)
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_with_context(logger, logging.INFO, "hello", name="clash", message="clash", lineno=1, score=50)

        record = caplog.records[0]
        assert record.name == LOGGER_NAME
        assert record.score == 50


class TestLogException:

    def test_category_and_error_fields(self, caplog):
        logger = logging.getLogger(LOGGER_NAME)
        error = PermanentError("No legacy submission id for submission s1")

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            log_exception(logger, error, "Routing faulted", level=logging.WARNING, include_traceback=False, resource="review")

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.error_category == "permanent"
        assert record.error_type == "PermanentError"
        assert record.error_message == "No legacy submission id for submission s1"
        assert record.resource == "review"
        assert record.exc_info is None

    def test_traceback_and_truncation(self, caplog):
        logger = logging.getLogger(LOGGER_NAME)
        error = RuntimeError("x" * 600)

        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            log_exception(logger, error, "Failed")

        record = caplog.records[0]
        assert record.exc_info[1] is error
        assert len(record.error_message) == 503
        assert not hasattr(record, "error_category")


def test_startup_banner(caplog):
    logger = logging.getLogger(LOGGER_NAME)
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        log_startup_banner(
            logger,
            "Legacy MM Score Worker",
            worker_id="w1",
            topics="submission.notification.create, submission.notification.update",
            metrics_port=0,
        )

    banner = caplog.records[0].getMessage()
    assert "Legacy MM Score Worker" in banner
    assert "Worker:       w1" in banner
    assert "Topics:       submission.notification.create, submission.notification.update" in banner
    assert "Metrics" not in banner
