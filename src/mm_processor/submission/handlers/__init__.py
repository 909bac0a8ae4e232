"""
Submission event handlers.

Handler Types:
    - ReviewHandler: Handles review events
    - ReviewSummationHandler: Handles reviewSummation events

Usage:
    >>> from mm_processor.submission.handlers import get_handler_registry
    >>>
    >>> # Handlers are auto-registered on first registry access
    >>> registry = get_handler_registry()
    >>> handler_class = registry.get_handler_class("review")
"""

from mm_processor.submission.handlers.base import (
    EventHandler,
    HandlerRegistry,
    get_handler_registry as _get_handler_registry_base,
    register_handler,
    reset_registry,
)

# Flag to track if handlers have been registered
_handlers_registered = False


def _ensure_handlers_registered() -> None:
    """Lazily import and register all handlers on first access."""
    global _handlers_registered
    registry = _get_handler_registry_base()
    if _handlers_registered and registry.get_registered_handlers():
        return

    # Import handlers to trigger @register_handler decorator
    from mm_processor.submission.handlers import review, review_summation

    # A reset registry needs the already-imported classes registered again
    for handler_class in (review.ReviewHandler, review_summation.ReviewSummationHandler):
        if registry.get_handler_class(handler_class.resources[0]) is None:
            registry.register(handler_class)

    _handlers_registered = True


def get_handler_registry() -> HandlerRegistry:
    """Get the handler registry with all handlers registered."""
    _ensure_handlers_registered()
    return _get_handler_registry_base()


__all__ = [
    "EventHandler",
    "HandlerRegistry",
    "get_handler_registry",
    "register_handler",
    "reset_registry",
]
