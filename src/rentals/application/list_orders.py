"""Application service: order listings for renters and staff."""

from __future__ import annotations

from enum import Enum

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.order import Order, OrderStatus
from rentals.domain.repository.unit_of_work import UnitOfWork


class OrderListing(Enum):
    MINE = "mine"
    PENDING_AUDIT = "pending-audit"
    OVERDUE = "overdue"
    EXPIRING_TODAY = "expiring-today"


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self, auth: AuthContext, listing: OrderListing = OrderListing.MINE
    ) -> list[OrderDTO]:
        if listing == OrderListing.MINE:
            orders = self._uow.orders.list_by_user_id(auth.user_id)
        else:
            require_roles(auth, self._config.staff_roles, f"list {listing.value} orders")
            orders = self._staff_listing(listing)
        return [order_to_dto(o) for o in sorted(orders, key=_newest_first)]

    def _staff_listing(self, listing: OrderListing) -> list[Order]:
        today = self._config.today()
        if listing == OrderListing.PENDING_AUDIT:
            return self._uow.orders.list_by_status(OrderStatus.PENDING)
        in_use = self._uow.orders.list_by_status(OrderStatus.IN_USE)
        if listing == OrderListing.OVERDUE:
            return [o for o in in_use if o.end_date < today]
        return [o for o in in_use if o.end_date == today]


def _newest_first(order: Order) -> tuple:
    return (-order.created_at.timestamp(), -(order.id or 0))
