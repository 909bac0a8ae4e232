"""
Tests for the submission topic consumer.

aiokafka is replaced with AsyncMock consumers; no broker is needed.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiokafka.structs import TopicPartition

from mm_processor.common import consumer as consumer_module
from mm_processor.common.consumer import MessageConsumer, build_consumer_config
from mm_processor.common.types import PipelineMessage


def _message(offset=5, value=b'{"topic": "submission.notification.create"}'):
    return PipelineMessage(
        topic="submission.notification.create",
        partition=1,
        offset=offset,
        timestamp=1700000000000,
        key=b"key",
        value=value,
    )


@pytest.fixture
def handler():
    return AsyncMock()


@pytest.fixture
def consumer(processor_config, handler):
    consumer = MessageConsumer(processor_config, processor_config.topics, handler)
    consumer._consumer = AsyncMock()
    return consumer


class TestBuildConsumerConfig:

    def test_plaintext(self, processor_config):
        kafka_config = build_consumer_config(processor_config)

        assert kafka_config == {
            "bootstrap_servers": "localhost:9092",
            "group_id": "legacy-mm-processor-group",
            "enable_auto_commit": False,
            "auto_offset_reset": "earliest",
        }

    def test_group_override(self, processor_config):
        assert build_consumer_config(processor_config, "other-group")["group_id"] == "other-group"

    def test_ssl_from_cert_files(self, processor_config):
        processor_config.kafka_client_cert = "/certs/client.pem"
        processor_config.kafka_client_cert_key = "/certs/client.key"
        ssl_context = MagicMock()

        with patch.object(consumer_module, "create_ssl_context", return_value=ssl_context) as create:
            kafka_config = build_consumer_config(processor_config)

        create.assert_called_once_with(certfile="/certs/client.pem", keyfile="/certs/client.key")
        assert kafka_config["security_protocol"] == "SSL"
        assert kafka_config["ssl_context"] is ssl_context


class TestMessageConsumer:

    def test_requires_topics(self, processor_config, handler):
        with pytest.raises(ValueError, match="At least one topic"):
            MessageConsumer(processor_config, [], handler)

    async def test_handled_message_is_committed(self, consumer, handler):
        message = _message(offset=5)

        await consumer._process_message(message)

        handler.assert_awaited_once_with(message)
        consumer._consumer.commit.assert_awaited_once_with(
            {TopicPartition("submission.notification.create", 1): 6}
        )

    async def test_handler_failure_skips_commit(self, consumer, handler):
        handler.side_effect = RuntimeError("store unavailable")

        await consumer._process_message(_message())

        consumer._consumer.commit.assert_not_awaited()

    async def test_commit_failure_is_counted(self, consumer):
        consumer._consumer.commit.side_effect = RuntimeError("rebalance in progress")
        before = consumer_module.commit_errors_total._value.get()

        await consumer._process_message(_message())

        assert consumer_module.commit_errors_total._value.get() == before + 1

    async def test_commit_before_start_is_noop(self, processor_config, handler):
        consumer = MessageConsumer(processor_config, processor_config.topics, handler)

        await consumer.commit(_message())

    async def test_stop_is_idempotent(self, consumer):
        kafka = consumer._consumer

        await consumer.stop()
        await consumer.stop()

        kafka.stop.assert_awaited_once()
        assert consumer._consumer is None

    async def test_start_consumes_until_stopped(self, processor_config, handler):
        consumer = MessageConsumer(processor_config, processor_config.topics, handler)
        record = MagicMock(
            topic="submission.notification.create",
            partition=0,
            offset=0,
            timestamp=1700000000000,
            key=None,
            value=b"{}",
            headers=None,
        )
        kafka = AsyncMock()
        calls = []

        async def getmany(timeout_ms):
            calls.append(timeout_ms)
            if len(calls) > 1:
                consumer._running = False
                return {}
            return {TopicPartition(record.topic, 0): [record]}

        kafka.getmany.side_effect = getmany

        with patch.object(consumer_module, "AIOKafkaConsumer", return_value=kafka) as factory:
            await consumer.start()

        assert factory.call_args.args == tuple(processor_config.topics)
        kafka.start.assert_awaited_once()
        handler.assert_awaited_once()
        assert handler.await_args.args[0].value == b"{}"
        kafka.commit.assert_awaited_once_with({TopicPartition(record.topic, 0): 1})
        assert consumer.is_running is False

    async def test_fetch_error_is_retried(self, processor_config, handler):
        consumer = MessageConsumer(processor_config, processor_config.topics, handler)
        kafka = AsyncMock()
        calls = []

        async def getmany(timeout_ms):
            calls.append(timeout_ms)
            if len(calls) == 1:
                raise ConnectionError("broker down")
            consumer._running = False
            return {}

        kafka.getmany.side_effect = getmany

        with patch.object(consumer_module, "AIOKafkaConsumer", return_value=kafka), patch.object(
            consumer_module.asyncio, "sleep", AsyncMock()
        ) as sleep:
            await consumer.start()

        assert calls == [1000, 1000]
        sleep.assert_awaited_once_with(1)
        handler.assert_not_awaited()
