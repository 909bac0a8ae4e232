"""Submission event and routing result schemas."""

from mm_processor.submission.schemas.events import (
    EntityId,
    GenericPayload,
    Payload,
    PayloadMetadata,
    Resource,
    ReviewPayload,
    ReviewSummationPayload,
    SubmissionEvent,
    SubmissionPayload,
)
from mm_processor.submission.schemas.results import (
    DropReason,
    MutationKind,
    OutcomeKind,
    ReviewScoreUpdate,
    RoutingOutcome,
)

__all__ = [
    "DropReason",
    "EntityId",
    "GenericPayload",
    "MutationKind",
    "OutcomeKind",
    "Payload",
    "PayloadMetadata",
    "Resource",
    "ReviewPayload",
    "ReviewScoreUpdate",
    "ReviewSummationPayload",
    "RoutingOutcome",
    "SubmissionEvent",
    "SubmissionPayload",
]
