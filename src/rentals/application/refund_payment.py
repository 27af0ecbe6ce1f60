"""Application service: manual refund of a settled payment."""

from __future__ import annotations

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import PaymentDTO, payment_to_dto
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.unit_of_work import UnitOfWork


class RefundPaymentHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self, auth: AuthContext, payment_no: str, amount: str, reason: str = ""
    ) -> PaymentDTO:
        require_roles(auth, self._config.finance_roles, "issue refunds")
        money = Money.parse(amount)

        with self._uow.transaction() as uow:
            payment = uow.payments.get_by_payment_no(payment_no)
            if payment is None:
                raise NotFoundError(f"Payment {payment_no} not found")
            refund = self._config.reconciler(uow).refund(
                payment, money, reason or f"refund issued by {auth.user_id}"
            )

        return payment_to_dto(refund)
