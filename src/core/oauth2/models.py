"""OAuth2 data models."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


@dataclass
class OAuth2Token:
    """
    OAuth2 access token with expiration tracking.

    Attributes:
        access_token: The access token string
        token_type: Token type (typically "Bearer")
        expires_at: UTC timestamp when token expires
        scope: Space-separated scopes granted
    """

    access_token: str
    token_type: str
    expires_at: datetime
    scope: str | None = None

    @classmethod
    def from_response(cls, response: dict, max_age_seconds: float | None = None) -> "OAuth2Token":
        """
        Create token from an OAuth2 token response.

        Args:
            response: OAuth2 token response dict
            max_age_seconds: Optional cap on how long the token is reused,
                even when the server grants a longer lifetime
        """
        expires_in = float(response.get("expires_in", 3600))
        if max_age_seconds is not None:
            expires_in = min(expires_in, max_age_seconds)

        return cls(
            access_token=response["access_token"],
            token_type=response.get("token_type", "Bearer"),
            expires_at=datetime.now(UTC) + timedelta(seconds=expires_in),
            scope=response.get("scope"),
        )

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check if token is expired or within buffer_seconds of expiry."""
        return datetime.now(UTC) >= self.expires_at - timedelta(seconds=buffer_seconds)


__all__ = ["OAuth2Token"]
