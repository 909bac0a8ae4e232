"""
Legacy MM processor.

Consumes submission notification events from Kafka, keeps the review and
review summation events of marathon-match challenges, and writes their scores
into the legacy submission store.

Packages:
    - submission: validation, enrichment, routing and score dispatch
    - legacy: legacy store interface and SQLAlchemy implementation
    - common: Kafka consumer, metrics and shared utilities
    - workers: the long-running score worker
"""

__version__ = "1.0.0"
