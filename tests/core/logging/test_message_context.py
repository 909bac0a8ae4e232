"""Tests for message transport log context."""

from core.logging.message_context import get_message_context, message_log_context


def test_empty_outside_context():
    assert get_message_context() == {}


def test_binds_non_none_fields():
    with message_log_context(topic="submission.notification.update", partition=3, offset=0) as context:
        assert context == {
            "message_topic": "submission.notification.update",
            "message_partition": 3,
            "message_offset": 0,
        }
        assert get_message_context() == context

    assert get_message_context() == {}


def test_nested_contexts_restore():
    with message_log_context(topic="outer", offset=1):
        with message_log_context(topic="inner", key="k1", consumer_group="g1"):
            assert get_message_context() == {
                "message_topic": "inner",
                "message_key": "k1",
                "message_consumer_group": "g1",
            }
        assert get_message_context()["message_topic"] == "outer"


def test_returned_copy_is_isolated():
    with message_log_context(topic="t"):
        get_message_context()["message_topic"] = "changed"
        assert get_message_context()["message_topic"] == "t"
