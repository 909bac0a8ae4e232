"""
Base handler class and registry for submission event processing.

Provides the EventHandler abstract base class, the resource-keyed handler
registry the router branches through, and the registration decorator.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from config.config import ProcessorConfig
from core.logging import get_logger, log_with_context
from mm_processor.submission.dispatcher import ScoreMutationDispatcher
from mm_processor.submission.enrichment import EnrichmentClient
from mm_processor.submission.exceptions import LegacySubmissionNotFoundError
from mm_processor.common.utils import get_path, safe_int
from mm_processor.submission.schemas.events import EntityId, SubmissionEvent
from mm_processor.submission.schemas.results import RoutingOutcome

logger = get_logger(__name__)


class EventHandler(ABC):
    """
    Base class for submission event handlers.

    Each handler processes the payload resources it declares and returns a
    RoutingOutcome. Faults are raised, not returned; the router captures them.

    Attributes:
        resources: Payload resource values this handler processes
        config: Processor configuration (filters, topics)
        enrichment: Enrichment client for submission lookups
        dispatcher: Score mutation dispatcher
    """

    resources: List[str] = []

    def __init__(
        self,
        config: ProcessorConfig,
        enrichment: EnrichmentClient,
        dispatcher: ScoreMutationDispatcher,
    ):
        self.config = config
        self.enrichment = enrichment
        self.dispatcher = dispatcher

    @property
    def name(self) -> str:
        """Handler name for logging."""
        return self.__class__.__name__

    @abstractmethod
    async def handle_event(self, event: SubmissionEvent) -> RoutingOutcome:
        """
        Process a single relevant event.

        Args:
            event: Validated event whose subTrack is in the allow-set

        Returns:
            Dropped or mutated outcome

        Raises:
            LegacySubmissionNotFoundError: If no legacy submission id resolves
            LegacyStoreError: If the store mutation fails
        """

    async def fetch_legacy_submission_id(self, submission_id: Optional[EntityId]) -> int:
        """Fetch the submission record and return its legacySubmissionId.

        Raises:
            LegacySubmissionNotFoundError: If the record or its legacy id is missing
        """
        record = await self.enrichment.fetch_submission(submission_id)
        legacy_submission_id = safe_int(get_path(record, "legacySubmissionId"))
        if not legacy_submission_id or legacy_submission_id <= 0:
            raise LegacySubmissionNotFoundError(submission_id)

        log_with_context(
            logger,
            logging.DEBUG,
            "Resolved legacy submission id",
            handler_name=self.name,
            submission_id=str(submission_id),
            legacy_submission_id=legacy_submission_id,
        )
        return legacy_submission_id


# Global handler registry
_handler_registry: Optional["HandlerRegistry"] = None


class HandlerRegistry:
    """Registry mapping payload resources to handler classes."""

    def __init__(self):
        self._handlers: Dict[str, Type[EventHandler]] = {}

    def register(self, handler_class: Type[EventHandler]) -> None:
        """Register a handler class for its resources."""
        for resource in handler_class.resources:
            if resource in self._handlers:
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Overwriting handler registration",
                    resource=resource,
                    old_handler=self._handlers[resource].__name__,
                    new_handler=handler_class.__name__,
                )
            self._handlers[resource] = handler_class
            log_with_context(
                logger,
                logging.DEBUG,
                "Registered handler",
                handler_name=handler_class.__name__,
                resource=resource,
            )

    def get_handler_class(self, resource: Optional[str]) -> Optional[Type[EventHandler]]:
        """Get handler class for a payload resource."""
        if resource is None:
            return None
        return self._handlers.get(resource)

    def get_registered_handlers(self) -> Dict[str, str]:
        """Get map of resource -> handler_name for diagnostics."""
        return {resource: handler.__name__ for resource, handler in self._handlers.items()}


def get_handler_registry() -> HandlerRegistry:
    """Get or create global handler registry."""
    global _handler_registry
    if _handler_registry is None:
        _handler_registry = HandlerRegistry()
    return _handler_registry


def reset_registry() -> None:
    """Reset global registry (for testing)."""
    global _handler_registry
    _handler_registry = None


def register_handler(cls: Type[EventHandler]) -> Type[EventHandler]:
    """
    Decorator to register a handler class.

    Usage:
        @register_handler
        class ReviewHandler(EventHandler):
            resources = ["review"]
            ...
    """
    get_handler_registry().register(cls)
    return cls
