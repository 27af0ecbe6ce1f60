"""Application service: open a payment against an order."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import PaymentDTO, payment_to_dto
from rentals.domain.exceptions import NotFoundError, ValidationError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.payment import PaymentMethod, PaymentType
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.unit_of_work import UnitOfWork

E = TypeVar("E", bound=Enum)


class LinkPaymentHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self,
        auth: AuthContext,
        order_id: int,
        amount: str,
        method: str,
        payment_type: str = PaymentType.RENTAL.value,
    ) -> PaymentDTO:
        money = Money.parse(amount)
        pay_method = parse_choice(PaymentMethod, method, "payment method")
        pay_type = parse_choice(PaymentType, payment_type, "payment type")

        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            require_owner_or_roles(
                auth, order.user_id, self._config.finance_roles, "pay for this order"
            )
            payment = self._config.reconciler(uow).link_payment(
                order, money, pay_method, pay_type
            )

        return payment_to_dto(payment)


def parse_choice(enum_cls: type[E], raw: str, label: str) -> E:
    try:
        return enum_cls(raw.strip().upper())
    except ValueError as exc:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Unknown {label} '{raw}' (expected one of: {choices})") from exc
