"""EventPublisher adapter that reports status changes to the log."""

from __future__ import annotations

import logging

from rentals.domain.model.events import OrderStatusChanged
from rentals.domain.repository.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):

    def publish(self, event: OrderStatusChanged) -> None:
        logger.info(
            "Notify: order %s changed %s -> %s at %s",
            event.order_no,
            event.old_status.value,
            event.new_status.value,
            event.occurred_at.isoformat(),
        )
