"""
Routing result schemas.

Contains:
- ReviewScoreUpdate: marshalled review-score row handed to the legacy store
- RoutingOutcome: three-way result of routing one message
  (dropped, mutated or faulted)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OutcomeKind(str, Enum):
    DROPPED = "dropped"
    MUTATED = "mutated"
    FAULTED = "faulted"


class MutationKind(str, Enum):
    REVIEW_SCORE = "review_score"
    FINAL_SCORE = "final_score"


class DropReason(str, Enum):
    """Why a message was dropped without touching the legacy store."""

    EMPTY = "empty"
    MALFORMED_JSON = "malformed_json"
    INVALID_EVENT = "invalid_event"
    TOPIC = "topic"
    ORIGINATOR = "originator"
    SUBMISSION_RESOURCE = "submission_resource"
    SUB_TRACK_UNRESOLVED = "sub_track_unresolved"
    SUB_TRACK = "sub_track"
    INVALID_TYPE_ID = "invalid_type_id"
    NOT_NEW_SUBMISSION_TOPIC = "not_new_submission_topic"
    MISSING_SCORE = "missing_score"
    MISSING_AGGREGATE_SCORE = "missing_aggregate_score"
    NO_HANDLER = "no_handler"


class ReviewScoreUpdate(BaseModel):
    """Review score row written to the legacy store.

    Attributes:
        review_id: Review id from the event payload
        submission_id: Submission the review belongs to
        legacy_submission_id: Resolved legacy store submission id
        score: Review score (0-100)
        type_id: Review type id
        test_type: metadata.testType (provisional, system, final)
        reviewer_id: Reviewer id, if present
        score_card_id: Score card id, if present
    """

    model_config = ConfigDict(frozen=True)

    review_id: str = Field(..., min_length=1)
    submission_id: Optional[str] = None
    legacy_submission_id: int = Field(..., gt=0)
    score: Optional[float] = Field(default=None, ge=0, le=100)
    type_id: Optional[str] = None
    test_type: Optional[str] = None
    reviewer_id: Optional[str] = None
    score_card_id: Optional[str] = None


@dataclass(frozen=True)
class RoutingOutcome:
    """Result of routing a single message.

    Attributes:
        kind: Dropped, mutated or faulted
        reason: Drop reason (dropped outcomes only)
        mutation: Mutation applied (mutated outcomes only)
        error: Captured exception (faulted outcomes only)
    """

    kind: OutcomeKind
    reason: Optional[DropReason] = None
    mutation: Optional[MutationKind] = None
    error: Optional[BaseException] = None

    @classmethod
    def dropped(cls, reason: DropReason) -> "RoutingOutcome":
        return cls(kind=OutcomeKind.DROPPED, reason=reason)

    @classmethod
    def mutated(cls, mutation: MutationKind) -> "RoutingOutcome":
        return cls(kind=OutcomeKind.MUTATED, mutation=mutation)

    @classmethod
    def faulted(cls, error: BaseException) -> "RoutingOutcome":
        return cls(kind=OutcomeKind.FAULTED, error=error)

    @property
    def is_dropped(self) -> bool:
        return self.kind is OutcomeKind.DROPPED

    @property
    def is_mutated(self) -> bool:
        return self.kind is OutcomeKind.MUTATED

    @property
    def is_faulted(self) -> bool:
        return self.kind is OutcomeKind.FAULTED

    @property
    def label(self) -> str:
        """Short reason label used for metrics."""
        if self.reason is not None:
            return self.reason.value
        if self.mutation is not None:
            return self.mutation.value
        if self.error is not None:
            return type(self.error).__name__
        return ""
