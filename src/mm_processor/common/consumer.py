"""
Kafka consumer for the submission notification topics.

Provides async Kafka consumer functionality with:
- Manual offset commit after every record
- Optional SSL client certificate authentication
- Multiple topic subscription under one consumer group
- Per-message log context (topic, partition, offset)
- Graceful shutdown handling
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from aiokafka import AIOKafkaConsumer
from aiokafka.helpers import create_ssl_context
from aiokafka.structs import TopicPartition

from config.config import ProcessorConfig
from core.logging import get_logger, log_exception, log_with_context, message_log_context
from mm_processor.common.metrics import (
    commit_errors_total,
    record_message_consumed,
    update_connection_status,
)
from mm_processor.common.types import PipelineMessage, from_consumer_record

logger = get_logger(__name__)

MessageHandler = Callable[[PipelineMessage], Awaitable[None]]


def build_consumer_config(config: ProcessorConfig, group_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Build AIOKafkaConsumer keyword arguments from processor configuration.

    SSL is enabled when KAFKA_CLIENT_CERT and KAFKA_CLIENT_CERT_KEY point at
    PEM files; otherwise the connection is plaintext.
    """
    kafka_config: Dict[str, Any] = {
        "bootstrap_servers": config.kafka_url,
        "group_id": group_id or config.kafka_group_id,
        "enable_auto_commit": False,
        "auto_offset_reset": "earliest",
    }

    if config.kafka_client_cert and config.kafka_client_cert_key:
        kafka_config["security_protocol"] = "SSL"
        kafka_config["ssl_context"] = create_ssl_context(
            certfile=config.kafka_client_cert,
            keyfile=config.kafka_client_cert_key,
        )

    return kafka_config


class MessageConsumer:
    """
    Async Kafka consumer that feeds records to a handler one at a time.

    Each record is handled to completion and its offset committed before the
    next record is taken. Handler exceptions are logged; the offset is not
    committed for that record.

    Usage:
        >>> consumer = MessageConsumer(config, topics=config.topics, message_handler=handle)
        >>> await consumer.start()
        >>> # Consumer runs until stopped
        >>> await consumer.stop()
    """

    def __init__(
        self,
        config: ProcessorConfig,
        topics: List[str],
        message_handler: MessageHandler,
        group_id: Optional[str] = None,
    ):
        if not topics:
            raise ValueError("At least one topic must be specified")

        self.config = config
        self.topics = topics
        self.message_handler = message_handler
        self.group_id = group_id or config.kafka_group_id
        self._consumer: Optional[AIOKafkaConsumer] = None
        self._running = False

        log_with_context(
            logger,
            logging.INFO,
            "Initialized Kafka consumer",
            topics=topics,
            group_id=self.group_id,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    def _create_consumer(self) -> AIOKafkaConsumer:
        return AIOKafkaConsumer(*self.topics, **build_consumer_config(self.config, self.group_id))

    async def start(self) -> None:
        """
        Start the consumer and run the consumption loop until stop() is called.

        Raises:
            Exception: If the consumer fails to start or connect
        """
        if self._running:
            logger.warning("Consumer already running, ignoring duplicate start call")
            return

        self._consumer = self._create_consumer()
        await self._consumer.start()
        self._running = True
        update_connection_status(connected=True)

        log_with_context(
            logger,
            logging.INFO,
            "Kafka consumer started successfully",
            topics=self.topics,
            group_id=self.group_id,
        )

        try:
            await self._consume_loop()
        except asyncio.CancelledError:
            logger.info("Consumer loop cancelled, shutting down")
            raise
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop the consumer and release the connection. Safe to call multiple times."""
        if self._consumer is None:
            logger.debug("Consumer not running or already stopped")
            return

        logger.info("Stopping Kafka consumer")
        self._running = False
        consumer, self._consumer = self._consumer, None
        try:
            await consumer.stop()
            logger.info("Kafka consumer stopped successfully")
        finally:
            update_connection_status(connected=False)

    async def commit(self, message: Optional[PipelineMessage] = None) -> None:
        """Commit offsets; with a message, commit exactly past that record."""
        if self._consumer is None:
            logger.warning("Cannot commit: consumer not started")
            return
        if message is None:
            await self._consumer.commit()
            return
        await self._consumer.commit({TopicPartition(message.topic, message.partition): message.offset + 1})

    async def _consume_loop(self) -> None:
        while self._running and self._consumer is not None:
            try:
                data = await self._consumer.getmany(timeout_ms=1000)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not self._running:
                    return
                log_exception(logger, e, "Error fetching messages")
                await asyncio.sleep(1)
                continue

            for _, records in data.items():
                for record in records:
                    if not self._running:
                        logger.info("Consumer stopped, breaking message loop")
                        return
                    await self._process_message(from_consumer_record(record))

    async def _process_message(self, message: PipelineMessage) -> None:
        with message_log_context(
            topic=message.topic,
            partition=message.partition,
            offset=message.offset,
            key=message.key_str,
            consumer_group=self.group_id,
        ):
            record_message_consumed(message.topic)
            log_with_context(
                logger,
                logging.DEBUG,
                "Processing message",
                message_size=len(message.value) if message.value else 0,
            )

            try:
                await self.message_handler(message)
            except Exception as e:
                log_exception(logger, e, "Message handler failed, offset not committed")
                return

            try:
                await self.commit(message)
            except Exception as e:
                commit_errors_total.inc()
                log_exception(logger, e, "Failed to commit offset")
