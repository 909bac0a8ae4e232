"""Routing faults raised to the message consumer."""

from core.errors.exceptions import PermanentError


class LegacySubmissionNotFoundError(PermanentError):
    """A review-family event cannot be tied to a legacy submission id."""

    def __init__(self, submission_id, message: str | None = None):
        self.submission_id = submission_id
        super().__init__(
            message or f"legacySubmissionId not found for submission {submission_id}",
            context={"submission_id": str(submission_id) if submission_id is not None else None},
        )
