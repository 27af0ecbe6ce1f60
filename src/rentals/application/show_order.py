"""Application service: look up one order."""

from __future__ import annotations

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(self, auth: AuthContext, order_ref: str) -> OrderDTO:
        """Find an order by numeric id or by its order number."""
        if order_ref.isdigit():
            order = self._uow.orders.get_by_id(int(order_ref))
        else:
            order = self._uow.orders.get_by_order_no(order_ref)
        if order is None:
            raise NotFoundError(f"Order '{order_ref}' not found")
        require_owner_or_roles(
            auth, order.user_id, self._config.staff_roles, "view this order"
        )
        return order_to_dto(order)
