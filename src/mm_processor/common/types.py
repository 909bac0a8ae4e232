"""Transport message type handed from the Kafka consumer to workers.

Workers receive PipelineMessage instead of aiokafka's ConsumerRecord, so
handler code and tests never need aiokafka types.
"""

from dataclasses import dataclass

__all__ = [
    "PipelineMessage",
    "from_consumer_record",
]


@dataclass(frozen=True)
class PipelineMessage:
    """Message received from Kafka.

    Attributes:
        topic: Topic the message was received from
        partition: Partition number the message was received from
        offset: Message offset within the partition
        timestamp: Message timestamp in milliseconds since Unix epoch
        key: Optional message key as raw bytes
        value: Message payload as raw bytes (JSON-encoded event)
        headers: Optional list of (name, value) header tuples
    """

    topic: str
    partition: int
    offset: int
    timestamp: int
    key: bytes | None = None
    value: bytes | None = None
    headers: list[tuple[str, bytes]] | None = None

    @property
    def key_str(self) -> str | None:
        return self.key.decode("utf-8", errors="replace") if self.key else None

    @property
    def value_str(self) -> str | None:
        if self.value is None:
            return None
        return self.value.decode("utf-8", errors="replace")


def from_consumer_record(record) -> PipelineMessage:
    """Convert an aiokafka ConsumerRecord to a PipelineMessage.

    Accepts any object with the ConsumerRecord attributes so this module
    never imports aiokafka.
    """
    headers = None
    if getattr(record, "headers", None):
        headers = [(k, v) for k, v in record.headers]

    return PipelineMessage(
        topic=record.topic,
        partition=record.partition,
        offset=record.offset,
        timestamp=record.timestamp,
        key=record.key,
        value=record.value,
        headers=headers,
    )
