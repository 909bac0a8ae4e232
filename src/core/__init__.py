"""
Core library: Reusable, infrastructure-agnostic components.

Modules:
    errors   - Error classification and exception hierarchy
    logging  - Structured JSON logging with message context
    oauth2   - Client-credentials token acquisition and caching
    utils    - JSON serialization and worker id helpers

Design Principles:
    - No dependencies on the legacy store or the message transport
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory, MachineTokenProvider

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "MachineTokenProvider",
]
