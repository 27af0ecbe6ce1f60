"""Domain service: Payment/Refund Reconciler.

Links payments to orders, settles them from gateway results, applies
refunds and writes the matching finance ledger entries.  It is the only
writer of Payment rows and FinanceRecords; order status changes that a
settlement implies are left to ``OrderStateMachine`` (the reconciler
reports them through ``Settlement.order_covered``).

Every method expects to run inside ``UnitOfWork.transaction()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from rentals.domain.exceptions import (
    IllegalStateError,
    NotFoundError,
    RefundExceedsPaidError,
    ValidationError,
)
from rentals.domain.model.finance import (
    CATEGORY_DAMAGE,
    FinanceRecord,
    FinanceType,
)
from rentals.domain.model.order import Order, OrderStatus
from rentals.domain.model.payment import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.numbering import generate_number

logger = logging.getLogger(__name__)

_GATEWAY_STATUSES = {
    "SUCCESS": PaymentStatus.SUCCESS,
    "TRADE_SUCCESS": PaymentStatus.SUCCESS,
    "TRADE_FINISHED": PaymentStatus.SUCCESS,
    "PAID": PaymentStatus.SUCCESS,
    "FAILED": PaymentStatus.FAILED,
    "TRADE_CLOSED": PaymentStatus.FAILED,
    "CANCELLED": PaymentStatus.CANCELLED,
    "TRADE_CANCELLED": PaymentStatus.CANCELLED,
}


def parse_gateway_status(raw: str) -> PaymentStatus:
    """Map a gateway status string; anything unknown means still pending."""
    return _GATEWAY_STATUSES.get(raw.strip().upper(), PaymentStatus.PENDING)


@dataclass(frozen=True)
class Settlement:
    """Outcome of applying one gateway result."""

    payment: Payment
    duplicate: bool = False
    order_covered: bool = False


class PaymentReconciler:

    def __init__(
        self,
        uow: UnitOfWork,
        payment_prefix: str = "PAY",
        record_prefix: str = "FIN",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._payment_prefix = payment_prefix
        self._record_prefix = record_prefix
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # --- Linking and settlement -----------------------------------------------

    def link_payment(
        self,
        order: Order,
        amount: Money,
        method: PaymentMethod,
        payment_type: PaymentType,
    ) -> Payment:
        """Open a PENDING payment against *order*.

        RENTAL payments are accepted while the order is CONFIRMED, DEPOSIT
        payments while it is CONFIRMED or PAID.  The amount may not exceed
        what is still owed once settled and in-flight payments are counted.
        """
        if payment_type == PaymentType.REFUND:
            raise ValidationError("Refunds are issued through refund(), not linked")

        if payment_type == PaymentType.RENTAL:
            allowed, due = (OrderStatus.CONFIRMED,), order.total_amount
        else:
            allowed, due = (OrderStatus.CONFIRMED, OrderStatus.PAID), order.deposit_amount
        if order.status not in allowed:
            raise IllegalStateError(
                f"Order {order.order_no}", order.status.value, f"{payment_type.value} payment"
            )

        committed = self._total(
            order.id, payment_type, (PaymentStatus.SUCCESS, PaymentStatus.PENDING)
        )
        outstanding = due - committed if committed <= due else Money.zero()
        if amount > outstanding:
            raise ValidationError(
                f"{payment_type.value} payment of {amount} exceeds outstanding {outstanding}"
            )

        payment = Payment.create(
            payment_no=self._next_payment_no(),
            order_id=order.id,  # type: ignore[arg-type]
            amount=amount,
            method=method,
            type=payment_type,
        )
        self._uow.payments.save(payment)
        logger.info(
            "Linked %s payment %s of %s to order %s",
            payment_type.value, payment.payment_no, amount, order.order_no,
        )
        return payment

    def apply_gateway_result(
        self,
        payment_no: str,
        raw_status: str,
        transaction_id: str | None,
    ) -> Settlement:
        """Apply a verified gateway callback to its payment.

        Replaying a callback whose transaction id is already recorded is a
        no-op: no second settlement, no second ledger entry.
        """
        if transaction_id:
            seen = self._uow.payments.get_by_transaction_id(transaction_id)
            if seen is not None:
                if seen.payment_no != payment_no:
                    raise ValidationError(
                        f"Transaction {transaction_id} already belongs to payment "
                        f"{seen.payment_no}"
                    )
                logger.warning(
                    "Duplicate gateway callback for %s (transaction %s) ignored",
                    payment_no, transaction_id,
                )
                return Settlement(payment=seen, duplicate=True)

        payment = self._uow.payments.get_by_payment_no(payment_no)
        if payment is None:
            raise NotFoundError(f"Payment {payment_no} not found")

        status = parse_gateway_status(raw_status)
        if status == PaymentStatus.PENDING:
            return Settlement(payment=payment)
        if payment.status == status and transaction_id is None:
            return Settlement(payment=payment, duplicate=True)

        now = self._clock()
        if status == PaymentStatus.FAILED:
            payment.fail(transaction_id, at=now)
        elif status == PaymentStatus.CANCELLED:
            payment.cancel(at=now)
        else:
            payment.succeed(transaction_id, at=now)
        self._uow.payments.save(payment)
        logger.info("Payment %s is now %s", payment.payment_no, payment.status.value)

        if status != PaymentStatus.SUCCESS:
            return Settlement(payment=payment)

        order = self._uow.orders.get_by_id(payment.order_id)
        if order is None:
            raise NotFoundError(f"Order #{payment.order_id} not found")
        self._record(
            FinanceType.INCOME,
            payment.type.value,
            payment.amount,
            f"{payment.type.value.lower()} payment {payment.payment_no} for order {order.order_no}",
            order_id=order.id,
            payment_id=payment.id,
        )

        if order.status == OrderStatus.CANCELLED:
            logger.warning(
                "Payment %s settled after order %s was cancelled; refunding",
                payment.payment_no, order.order_no,
            )
            self.refund(payment, payment.amount, "order already cancelled")
            return Settlement(payment=payment)

        covered = (
            payment.type == PaymentType.RENTAL
            and order.status == OrderStatus.CONFIRMED
            and self._total(order.id, PaymentType.RENTAL, (PaymentStatus.SUCCESS,))
            >= order.total_amount
        )
        return Settlement(payment=payment, order_covered=covered)

    def cancel_payment(self, payment: Payment) -> Payment:
        """Abandon a PENDING payment (e.g. after a gateway timeout)."""
        payment.cancel(at=self._clock())
        self._uow.payments.save(payment)
        logger.info("Payment %s cancelled", payment.payment_no)
        return payment

    # --- Refunds --------------------------------------------------------------

    def refundable_amount(self, payment: Payment) -> Money:
        if not payment.is_settled or payment.type == PaymentType.REFUND:
            return Money.zero()
        refunded = Money.total([
            p.amount
            for p in self._uow.payments.list_by_order_id(payment.order_id)
            if p.type == PaymentType.REFUND
            and p.refunded_payment_id == payment.id
            and p.status == PaymentStatus.SUCCESS
        ])
        return payment.amount - refunded if refunded <= payment.amount else Money.zero()

    def refund(self, payment: Payment, amount: Money, reason: str) -> Payment:
        """Return *amount* of a settled payment to the renter."""
        if payment.type == PaymentType.REFUND:
            raise ValidationError(f"Payment {payment.payment_no} is itself a refund")
        if amount.amount <= 0:
            raise ValidationError("Refund amount must be greater than zero")
        refundable = self.refundable_amount(payment)
        if amount > refundable:
            raise RefundExceedsPaidError(amount, refundable)

        refund = Payment.create(
            payment_no=self._next_payment_no(),
            order_id=payment.order_id,
            amount=amount,
            method=payment.method,
            type=PaymentType.REFUND,
            refunded_payment_id=payment.id,
            reason=reason,
        )
        refund.succeed(None, at=self._clock())
        self._uow.payments.save(refund)
        self._record(
            FinanceType.REFUND,
            payment.type.value,
            amount,
            f"refund {refund.payment_no} of payment {payment.payment_no}: {reason}",
            order_id=payment.order_id,
            payment_id=payment.id,
        )
        logger.info(
            "Refunded %s of payment %s (%s)", amount, payment.payment_no, reason
        )
        return refund

    def refund_order(
        self,
        order: Order,
        reason: str,
        types: tuple[PaymentType, ...] = (PaymentType.RENTAL, PaymentType.DEPOSIT),
    ) -> list[Payment]:
        """Refund whatever is left of every settled payment of the given types."""
        refunds: list[Payment] = []
        for payment in self._uow.payments.list_by_order_id(order.id):  # type: ignore[arg-type]
            if payment.type not in types:
                continue
            remaining = self.refundable_amount(payment)
            if not remaining.is_zero:
                refunds.append(self.refund(payment, remaining, reason))
        return refunds

    def refund_deposit(self, order: Order, reason: str) -> list[Payment]:
        return self.refund_order(order, reason, types=(PaymentType.DEPOSIT,))

    # --- Ledger ---------------------------------------------------------------

    def record_damage(self, order: Order, amount: Money, description: str) -> FinanceRecord:
        text = f"damage on order {order.order_no}"
        if description:
            text = f"{text}: {description}"
        return self._record(
            FinanceType.EXPENSE, CATEGORY_DAMAGE, amount, text, order_id=order.id
        )

    def settled_total(self, order_id: int, payment_type: PaymentType) -> Money:
        return self._total(order_id, payment_type, (PaymentStatus.SUCCESS,))

    # --- Internal helpers -----------------------------------------------------

    def _total(
        self,
        order_id: int | None,
        payment_type: PaymentType,
        statuses: tuple[PaymentStatus, ...],
    ) -> Money:
        if order_id is None:
            return Money.zero()
        return Money.total([
            p.amount
            for p in self._uow.payments.list_by_order_id(order_id)
            if p.type == payment_type and p.status in statuses
        ])

    def _record(
        self,
        type: FinanceType,
        category: str,
        amount: Money,
        description: str,
        order_id: int | None = None,
        payment_id: int | None = None,
    ) -> FinanceRecord:
        now = self._clock()
        record = FinanceRecord(
            record_no=generate_number(
                self._record_prefix, self._uow.finance_records.exists_by_record_no, now
            ),
            type=type,
            category=category,
            amount=amount,
            description=description,
            order_id=order_id,
            payment_id=payment_id,
            created_at=now,
        )
        return self._uow.finance_records.add(record)

    def _next_payment_no(self) -> str:
        return generate_number(
            self._payment_prefix, self._uow.payments.exists_by_payment_no, self._clock()
        )
