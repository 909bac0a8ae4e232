"""
OAuth2 client-credentials support.

Provides the Auth0 machine-to-machine token client used to attach bearer
tokens to Submission API calls.
"""

from core.oauth2.exceptions import (
    InvalidConfigurationError,
    OAuth2Error,
    TokenAcquisitionError,
)
from core.oauth2.m2m import MachineTokenClient
from core.oauth2.models import OAuth2Token

__all__ = [
    "MachineTokenClient",
    "OAuth2Token",
    "OAuth2Error",
    "TokenAcquisitionError",
    "InvalidConfigurationError",
]
