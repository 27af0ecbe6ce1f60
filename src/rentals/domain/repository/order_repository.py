"""Abstract repository for the Order aggregate.

This is the only writer of OrderItem rows: lines are saved and loaded
together with their order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_no(self, order_no: str) -> Order | None:
        """Return an order by its public number, or None if not found."""

    @abstractmethod
    def list_by_item_id(self, item_id: str) -> list[Order]:
        """Return every order with a line for *item_id*, in any status."""

    @abstractmethod
    def list_by_user_id(self, user_id: str) -> list[Order]:
        """Return the orders placed by *user_id*."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return the orders currently in *status*."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order together with its lines."""

    def exists_by_order_no(self, order_no: str) -> bool:
        return self.get_by_order_no(order_no) is not None
