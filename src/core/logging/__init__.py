"""
Structured logging module.

Provides JSON logging with event and message context propagation.
"""

from core.logging.context import (
    EventLogContext,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.message_context import get_message_context, message_log_context
from core.logging.setup import get_logger, parse_log_level, setup_logging
from core.logging.utilities import log_exception, log_startup_banner, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    "parse_log_level",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "EventLogContext",
    # Message Context
    "message_log_context",
    "get_message_context",
    # Utilities
    "log_with_context",
    "log_exception",
    "log_startup_banner",
]
