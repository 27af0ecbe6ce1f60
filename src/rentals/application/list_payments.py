"""Application service: payments (refunds included) of one order."""

from __future__ import annotations

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import PaymentDTO, payment_to_dto
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.repository.unit_of_work import UnitOfWork


class ListPaymentsHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(self, auth: AuthContext, order_id: int) -> list[PaymentDTO]:
        order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        require_owner_or_roles(
            auth, order.user_id, self._config.staff_roles, "view these payments"
        )
        payments = self._uow.payments.list_by_order_id(order_id)
        return [payment_to_dto(p) for p in sorted(payments, key=lambda p: p.id or 0)]
