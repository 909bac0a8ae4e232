"""Legacy submission store."""

from mm_processor.legacy.store import (
    LegacyStore,
    LegacyStoreError,
    SqlLegacyStore,
    review_column,
    score_column,
)

__all__ = [
    "LegacyStore",
    "LegacyStoreError",
    "SqlLegacyStore",
    "review_column",
    "score_column",
]
