"""Application service: abandon a payment that never settled."""

from __future__ import annotations

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import PaymentDTO, payment_to_dto
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.repository.unit_of_work import UnitOfWork


class CancelPaymentHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(self, auth: AuthContext, payment_no: str) -> PaymentDTO:
        with self._uow.transaction() as uow:
            payment = uow.payments.get_by_payment_no(payment_no)
            if payment is None:
                raise NotFoundError(f"Payment {payment_no} not found")
            order = uow.orders.get_by_id(payment.order_id)
            owner = order.user_id if order is not None else ""
            require_owner_or_roles(
                auth, owner, self._config.finance_roles, "cancel this payment"
            )
            self._config.reconciler(uow).cancel_payment(payment)

        return payment_to_dto(payment)
