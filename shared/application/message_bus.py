"""
Message Bus

Routes domain events to the handlers other apps register for them.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """Events can have multiple handlers (1:N)."""

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered event handler for %s", event_type.__name__)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[Callable]:
        return list(self._event_handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug("No handlers registered for event %s", event.name)
                continue

            logger.info("Publishing event: %s (ID: %s)", event.name, event.event_id)
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        "Error in event handler %s for event %s: %s",
                        getattr(handler, "__name__", repr(handler)),
                        event.name,
                        e,
                        exc_info=True,
                    )


# Global message bus instance
message_bus = MessageBus()
