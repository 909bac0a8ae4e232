"""
Prometheus metrics for the legacy MM processor.

Focused on essential metrics:
- Routing outcomes per message (dropped / mutated / faulted, with reason)
- Legacy store mutations by kind
- Message processing duration
- Consumer connection and commit health
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger(__name__)

events_total = Counter(
    "mm_processor_events_total",
    "Messages routed, by outcome and reason",
    ["outcome", "reason"],
)

mutations_total = Counter(
    "mm_processor_mutations_total",
    "Legacy store mutations applied, by kind",
    ["kind"],
)

processing_duration_seconds = Histogram(
    "mm_processor_processing_duration_seconds",
    "Time to route one message end to end",
    ["topic"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

messages_consumed_total = Counter(
    "mm_processor_messages_consumed_total",
    "Messages consumed from Kafka",
    ["topic"],
)

consumer_connected = Gauge(
    "mm_processor_consumer_connected",
    "1 while the Kafka consumer is connected",
)

commit_errors_total = Counter(
    "mm_processor_commit_errors_total",
    "Offset commits that failed",
)


def record_outcome(outcome: str, reason: str) -> None:
    events_total.labels(outcome=outcome, reason=reason).inc()


def record_mutation(kind: str) -> None:
    mutations_total.labels(kind=kind).inc()


def record_message_consumed(topic: str) -> None:
    messages_consumed_total.labels(topic=topic).inc()


def update_connection_status(connected: bool) -> None:
    consumer_connected.set(1 if connected else 0)


def start_metrics_server(port: int) -> None:
    """Expose /metrics on the given port (no-op when port is 0)."""
    if not port:
        return
    start_http_server(port)
    logger.info("Metrics server started", extra={"metrics_port": port})
