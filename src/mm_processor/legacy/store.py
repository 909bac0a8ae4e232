"""
Legacy relational store for submission scores.

LegacyStore is the interface the dispatcher writes through; SqlLegacyStore
implements it with SQLAlchemy Core against the legacy ``submission`` table.
Blocking driver calls run in a worker thread so the event loop keeps serving
the consumer.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors.exceptions import TransientError
from core.logging import get_logger, log_with_context
from mm_processor.submission.schemas.results import ReviewScoreUpdate

logger = get_logger(__name__)

SUBMISSION_TABLE = "submission"

# Event field name -> legacy column
SCORE_FIELDS = {
    "finalScore": "final_score",
    "initialScore": "initial_score",
}

# metadata.testType -> legacy column
TEST_TYPE_COLUMNS = {
    "provisional": "initial_score",
    "system": "final_score",
    "final": "final_score",
}
DEFAULT_REVIEW_COLUMN = "initial_score"


class LegacyStoreError(TransientError):
    """Legacy store mutation failed or matched no rows."""


def score_column(field_name: str) -> str:
    """Map an event score field onto its legacy column."""
    try:
        return SCORE_FIELDS[field_name]
    except KeyError:
        raise ValueError(
            f"Unsupported score field {field_name!r}, expected one of: {', '.join(SCORE_FIELDS)}"
        ) from None


def review_column(test_type: Optional[str]) -> str:
    """Map a review test type onto the legacy column it scores."""
    if not test_type:
        return DEFAULT_REVIEW_COLUMN
    return TEST_TYPE_COLUMNS.get(test_type.lower(), DEFAULT_REVIEW_COLUMN)


class LegacyStore(ABC):
    """Write-side interface of the legacy submission store."""

    @abstractmethod
    async def update_review_score(self, update: ReviewScoreUpdate) -> None:
        """Write a review score for a legacy submission."""

    @abstractmethod
    async def update_final_score(
        self,
        legacy_submission_id: int,
        score: float,
        field_name: str = "finalScore",
    ) -> None:
        """Write an aggregate score into the named score field."""

    async def close(self) -> None:
        """Release store resources."""


class SqlLegacyStore(LegacyStore):
    """
    SQLAlchemy Core implementation of the legacy store.

    Args:
        database_url: SQLAlchemy database URL (LEGACY_DB_URL)
        engine: Pre-built engine; takes precedence over database_url
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            if not database_url:
                raise ValueError("SqlLegacyStore requires a database URL. Set LEGACY_DB_URL.")
            engine = create_engine(database_url, pool_pre_ping=True)
        self.engine = engine

        logger.info(
            "Initialized legacy store",
            extra={"table": SUBMISSION_TABLE, "dialect": self.engine.dialect.name},
        )

    def _update_score(self, legacy_submission_id: int, column: str, score: float) -> int:
        # column comes from a fixed whitelist, never from event data
        statement = text(
            f"UPDATE {SUBMISSION_TABLE} SET {column} = :score WHERE submission_id = :submission_id"
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    statement,
                    {"score": score, "submission_id": legacy_submission_id},
                )
                rows = result.rowcount
        except SQLAlchemyError as e:
            raise LegacyStoreError(
                f"Failed to update {SUBMISSION_TABLE}.{column} for submission {legacy_submission_id}",
                cause=e,
                context={"legacy_submission_id": legacy_submission_id, "column": column},
            ) from e

        if rows == 0:
            raise LegacyStoreError(
                f"No legacy submission {legacy_submission_id} to update",
                context={"legacy_submission_id": legacy_submission_id, "column": column},
            )
        return rows

    async def _run_update(self, legacy_submission_id: int, column: str, score: float) -> None:
        rows = await asyncio.to_thread(self._update_score, legacy_submission_id, column, score)
        log_with_context(
            logger,
            logging.INFO,
            "Updated legacy submission score",
            legacy_submission_id=legacy_submission_id,
            table=SUBMISSION_TABLE,
            column=column,
            score=score,
            rows_updated=rows,
        )

    async def update_review_score(self, update: ReviewScoreUpdate) -> None:
        if update.score is None:
            raise ValueError(f"Review {update.review_id} carries no score")
        column = review_column(update.test_type)
        await self._run_update(update.legacy_submission_id, column, update.score)

    async def update_final_score(
        self,
        legacy_submission_id: int,
        score: float,
        field_name: str = "finalScore",
    ) -> None:
        column = score_column(field_name)
        await self._run_update(legacy_submission_id, column, score)

    async def close(self) -> None:
        await asyncio.to_thread(self.engine.dispose)
