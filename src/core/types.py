"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if the message is
                   processed again (e.g., network timeouts, 5xx errors)
        AUTH: Authentication failures (e.g., 401 errors, bad client credentials)
        PERMANENT: Failures that will never succeed for this message
                   (e.g., 404, missing attribution data, configuration issues)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class MachineTokenProvider(Protocol):
    """
    Protocol for machine-to-machine token providers.

    Implementations exchange client credentials for a bearer token that is
    attached to outbound calls against internal REST services.
    """

    async def get_machine_token(self, client_id: str, client_secret: str) -> str:
        """
        Get a bearer token for the given client credentials.

        Args:
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret

        Returns:
            Access token string

        Raises:
            TokenAcquisitionError: If the token cannot be acquired
        """
        ...


__all__ = [
    "ErrorCategory",
    "MachineTokenProvider",
]
