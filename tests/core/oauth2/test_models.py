"""Tests for OAuth2 data models."""

from datetime import UTC, datetime, timedelta

import pytest

from core.oauth2.models import OAuth2Token


class TestOAuth2Token:
    """Tests for OAuth2Token model."""

    @pytest.fixture
    def sample_response(self):
        """Sample Auth0 client-credentials response."""
        return {
            "access_token": "m2m-access-token",
            "token_type": "Bearer",
            "expires_in": 86400,
            "scope": "read:submissions",
        }

    def test_from_response_basic(self, sample_response):
        token = OAuth2Token.from_response(sample_response)

        assert token.access_token == "m2m-access-token"
        assert token.token_type == "Bearer"
        assert token.scope == "read:submissions"

    def test_from_response_defaults(self):
        before = datetime.now(UTC)
        token = OAuth2Token.from_response({"access_token": "t"})

        assert token.token_type == "Bearer"
        assert token.scope is None
        assert token.expires_at >= before + timedelta(seconds=3600)

    def test_max_age_caps_lifetime(self, sample_response):
        before = datetime.now(UTC)
        token = OAuth2Token.from_response(sample_response, max_age_seconds=600)
        after = datetime.now(UTC)

        assert before + timedelta(seconds=600) <= token.expires_at <= after + timedelta(seconds=600)

    def test_max_age_longer_than_grant_is_ignored(self, sample_response):
        sample_response["expires_in"] = 120
        after = datetime.now(UTC)
        token = OAuth2Token.from_response(sample_response, max_age_seconds=86400)

        assert token.expires_at <= datetime.now(UTC) + timedelta(seconds=120)
        assert token.expires_at >= after + timedelta(seconds=119)

    def test_is_expired_with_buffer(self):
        token = OAuth2Token(
            access_token="t",
            token_type="Bearer",
            expires_at=datetime.now(UTC) + timedelta(seconds=30),
        )

        assert token.is_expired() is True
        assert token.is_expired(buffer_seconds=0) is False
