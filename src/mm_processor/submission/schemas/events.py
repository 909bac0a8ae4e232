"""
Submission event message schemas.

Contains Pydantic models for the submission/review lifecycle events consumed
from the submission notification topics. The payload is a tagged variant keyed
by its ``resource`` field; payloads without a resource fall back to a generic
shape. Unknown fields are stripped at every level.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    PositiveInt,
    Tag,
)
from pydantic.alias_generators import to_camel

# Either a positive integer or a UUID string.
EntityId = Union[PositiveInt, UUID]


class Resource(str, Enum):
    """Payload resource kinds carried on submission notifications."""

    SUBMISSION = "submission"
    REVIEW = "review"
    REVIEW_SUMMATION = "reviewSummation"


_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
)


class PayloadMetadata(BaseModel):
    """Optional payload metadata; testType is mandatory when present."""

    model_config = _MODEL_CONFIG

    test_type: str


class BasePayload(BaseModel):
    """
    Fields shared by every payload variant.

    Attributes:
        id: Entity id (positive integer or UUID)
        challenge_id: Owning challenge id
        member_id: Submitting member id
        submission_phase_id: Phase the submission was made in
        url: Submission artifact URL
        type: Submission type label
        legacy_submission_id: Legacy store submission id, when already known
        is_example: 1 for example submissions, 0 otherwise
        type_id: Review type id
        score: Review score (0-100)
        metadata: Optional metadata with the review test type
    """

    model_config = _MODEL_CONFIG

    id: EntityId
    challenge_id: Optional[PositiveInt] = None
    member_id: Optional[PositiveInt] = None
    submission_phase_id: Optional[PositiveInt] = None
    url: Optional[AnyUrl] = None
    type: Optional[str] = None
    legacy_submission_id: Optional[PositiveInt] = None
    is_example: Optional[Literal[0, 1]] = None
    type_id: Optional[str] = None
    score: Optional[Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]] = None
    metadata: Optional[PayloadMetadata] = None

    @property
    def test_type(self) -> Optional[str]:
        return self.metadata.test_type if self.metadata else None


class SubmissionPayload(BasePayload):
    resource: Literal["submission"]


class ReviewPayload(BasePayload):
    resource: Literal["review"]
    submission_id: Optional[EntityId] = None
    reviewer_id: Optional[EntityId] = None
    score_card_id: Optional[EntityId] = None
    status: Optional[str] = None


class ReviewSummationPayload(BasePayload):
    resource: Literal["reviewSummation"]
    submission_id: Optional[EntityId] = None
    aggregate_score: Optional[Annotated[float, Field(allow_inf_nan=False)]] = None
    score_card_id: Optional[EntityId] = None
    is_passing: Optional[bool] = None


class GenericPayload(BasePayload):
    """Payload without a resource field."""

    resource: Literal[None] = None
    submission_id: Optional[EntityId] = None


GENERIC_TAG = "generic"


def _payload_tag(value: Any) -> str:
    """Pick the payload variant from the resource field (absent -> generic)."""
    if isinstance(value, dict):
        resource = value.get("resource")
    else:
        resource = getattr(value, "resource", None)
    if resource is None:
        return GENERIC_TAG
    if isinstance(resource, Enum):
        resource = resource.value
    return str(resource)


Payload = Annotated[
    Union[
        Annotated[SubmissionPayload, Tag(Resource.SUBMISSION.value)],
        Annotated[ReviewPayload, Tag(Resource.REVIEW.value)],
        Annotated[ReviewSummationPayload, Tag(Resource.REVIEW_SUMMATION.value)],
        Annotated[GenericPayload, Tag(GENERIC_TAG)],
    ],
    Discriminator(
        _payload_tag,
        custom_error_type="invalid_resource",
        custom_error_message="resource must be one of: submission, review, reviewSummation",
    ),
]


class SubmissionEvent(BaseModel):
    """Schema for submission notification events.

    Immutable once parsed; one instance lives for exactly one routing pass.

    Attributes:
        topic: Topic named inside the event envelope
        originator: Service that produced the event
        timestamp: Event creation time
        mime_type: Payload MIME type (``mime-type`` on the wire)
        payload: Resource-specific payload variant

    Example:
        >>> event = SubmissionEvent.model_validate({
        ...     "topic": "submission.notification.create",
        ...     "originator": "submission-api",
        ...     "timestamp": "2018-08-06T15:46:05.575Z",
        ...     "mime-type": "application/json",
        ...     "payload": {"resource": "review", "id": 1, "submissionId": 2},
        ... })
        >>> event.payload.resource
        'review'
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    topic: str
    originator: str
    timestamp: datetime
    mime_type: str = Field(..., alias="mime-type")
    payload: Payload

    @property
    def resource(self) -> Optional[str]:
        return self.payload.resource

    @property
    def submission_id(self) -> Optional[EntityId]:
        return getattr(self.payload, "submission_id", None)


__all__ = [
    "EntityId",
    "GenericPayload",
    "Payload",
    "PayloadMetadata",
    "Resource",
    "ReviewPayload",
    "ReviewSummationPayload",
    "SubmissionEvent",
    "SubmissionPayload",
]
