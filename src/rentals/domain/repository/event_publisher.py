"""Abstract outbound port for order status notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.events import OrderStatusChanged


class EventPublisher(ABC):

    @abstractmethod
    def publish(self, event: OrderStatusChanged) -> None:
        """Hand one event to the notification collaborator."""
