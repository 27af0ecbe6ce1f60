"""Payment entity.

Payments reference their order by id only; the order never owns them.
One order may collect several payments over its life (rent, deposit and
later refunds).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rentals.domain.exceptions import IllegalStateError, ValidationError
from rentals.domain.model.value_objects import Money


class PaymentMethod(Enum):
    ALIPAY = "ALIPAY"
    WECHAT = "WECHAT"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentType(Enum):
    RENTAL = "RENTAL"
    DEPOSIT = "DEPOSIT"
    REFUND = "REFUND"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass
class Payment:
    id: int | None
    payment_no: str
    order_id: int
    amount: Money
    method: PaymentMethod
    type: PaymentType
    status: PaymentStatus = PaymentStatus.PENDING
    third_party_transaction_id: str | None = None
    refunded_payment_id: int | None = None  # REFUND rows only
    reason: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        payment_no: str,
        order_id: int,
        amount: Money,
        method: PaymentMethod,
        type: PaymentType,
        refunded_payment_id: int | None = None,
        reason: str = "",
    ) -> Payment:
        if amount.amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        if (type == PaymentType.REFUND) != (refunded_payment_id is not None):
            raise ValidationError("Refund payments must reference the refunded payment")
        return Payment(
            id=None,
            payment_no=payment_no,
            order_id=order_id,
            amount=amount,
            method=method,
            type=type,
            refunded_payment_id=refunded_payment_id,
            reason=reason,
        )

    # --- State transitions ----------------------------------------------------

    def succeed(self, transaction_id: str | None, at: datetime | None = None) -> None:
        self._leave_pending(PaymentStatus.SUCCESS, at)
        self.third_party_transaction_id = transaction_id

    def fail(self, transaction_id: str | None = None, at: datetime | None = None) -> None:
        self._leave_pending(PaymentStatus.FAILED, at)
        self.third_party_transaction_id = transaction_id

    def cancel(self, at: datetime | None = None) -> None:
        self._leave_pending(PaymentStatus.CANCELLED, at)

    @property
    def is_settled(self) -> bool:
        return self.status == PaymentStatus.SUCCESS

    def _leave_pending(self, target: PaymentStatus, at: datetime | None) -> None:
        if self.status != PaymentStatus.PENDING:
            raise IllegalStateError(
                f"Payment {self.payment_no}", self.status.value, target.value
            )
        self.status = target
        self.updated_at = at or datetime.now(timezone.utc)
