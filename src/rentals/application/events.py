"""Post-commit dispatch of order status events."""

from __future__ import annotations

import logging

from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def dispatch_events(uow: UnitOfWork, publisher: EventPublisher) -> None:
    """Publish what the last committed transaction recorded.

    Notifications are fire-and-forget: the state change is already
    committed, so a publisher failure is logged and not raised.
    """
    for event in uow.collect_new_events():
        try:
            publisher.publish(event)
        except Exception:
            logger.exception(
                "Could not publish %s -> %s for order %s",
                event.old_status.value, event.new_status.value, event.order_no,
            )
