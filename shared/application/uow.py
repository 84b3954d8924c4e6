"""
Unit of Work

Wraps a database transaction and publishes the domain events recorded
inside it only after the transaction commits.
"""

from typing import List
import logging

from django.db import transaction  # type: ignore

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = ...  # mutate models
            uow.record(BookingConfirmed(aggregate_id=booking.pk))
        # Events are published after the outermost commit

    Nesting inside an existing atomic block is fine: publishing is deferred
    to the outermost commit through transaction.on_commit().
    """

    def __init__(self, using: str | None = None):
        self._events: List[DomainEvent] = []
        self._atomic = transaction.atomic(using=using)
        self._using = using

    def __enter__(self):
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def commit(self):
        events = self._events.copy()
        self._events.clear()
        logger.debug("Committing unit of work with %s events", len(events))
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

    def rollback(self):
        if self._events:
            logger.warning("Rolling back unit of work, discarding %s events", len(self._events))
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info("Publishing %s domain events after commit", len(events))
        try:
            message_bus.publish_events(events)
        except Exception as e:
            # Already committed; failures here are for monitoring only
            logger.error("Error publishing events: %s", e, exc_info=True)
