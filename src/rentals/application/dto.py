"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Amounts are formatted
strings (e.g. "450.00"), dates ISO strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from rentals.domain.model.finance import FinanceRecord
from rentals.domain.model.item import Item
from rentals.domain.model.order import Order
from rentals.domain.model.payment import Payment


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the renter asked for (item id + quantity)."""

    item_id: str
    quantity: int


@dataclass(frozen=True)
class ReturnRequest:
    """Input: the outcome of inspecting a returned order."""

    order_id: int
    return_date: date | None = None  # defaults to today
    has_damage: bool = False
    damage_description: str = ""
    damage_amount: str | None = None
    return_remark: str = ""


@dataclass(frozen=True)
class ItemDTO:
    id: str
    name: str
    price_per_day: str
    deposit: str
    status: str


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single order line as displayed to the user."""

    item_id: str
    item_name: str
    quantity: int
    price_per_day: str
    total_amount: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_no: str
    user_id: str
    status: str
    start_date: str
    end_date: str
    rental_days: int
    items: list[OrderItemDTO]
    total_amount: str
    deposit_amount: str
    is_paid: bool
    actual_return_date: str | None
    remark: str
    created_at: str


@dataclass(frozen=True)
class PaymentDTO:
    id: int
    payment_no: str
    order_id: int
    amount: str
    method: str
    type: str
    status: str
    third_party_transaction_id: str | None
    refunded_payment_id: int | None
    reason: str


@dataclass(frozen=True)
class FinanceRecordDTO:
    id: int
    record_no: str
    type: str
    category: str
    amount: str
    description: str
    order_id: int | None
    payment_id: int | None
    created_at: str


@dataclass(frozen=True)
class FinanceSummaryDTO:
    total_income: str
    total_expense: str
    total_refund: str
    net: str
    by_category: dict[str, str] = field(default_factory=dict)
    records: list[FinanceRecordDTO] = field(default_factory=list)


# --- Mapping ------------------------------------------------------------------


def item_to_dto(item: Item) -> ItemDTO:
    return ItemDTO(
        id=item.id,
        name=item.name,
        price_per_day=str(item.price_per_day),
        deposit=str(item.deposit),
        status=item.status.value,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_no=order.order_no,
        user_id=order.user_id,
        status=order.status.value,
        start_date=order.start_date.isoformat(),
        end_date=order.end_date.isoformat(),
        rental_days=order.rental_days,
        items=[
            OrderItemDTO(
                item_id=line.item_id,
                item_name=line.item_name,
                quantity=line.quantity.value,
                price_per_day=str(line.price_per_day),
                total_amount=str(line.total_amount),
            )
            for line in order.items
        ],
        total_amount=str(order.total_amount),
        deposit_amount=str(order.deposit_amount),
        is_paid=order.is_paid,
        actual_return_date=(
            order.actual_return_date.isoformat() if order.actual_return_date else None
        ),
        remark=order.remark,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def payment_to_dto(payment: Payment) -> PaymentDTO:
    return PaymentDTO(
        id=payment.id,  # type: ignore[arg-type]
        payment_no=payment.payment_no,
        order_id=payment.order_id,
        amount=str(payment.amount),
        method=payment.method.value,
        type=payment.type.value,
        status=payment.status.value,
        third_party_transaction_id=payment.third_party_transaction_id,
        refunded_payment_id=payment.refunded_payment_id,
        reason=payment.reason,
    )


def record_to_dto(record: FinanceRecord) -> FinanceRecordDTO:
    return FinanceRecordDTO(
        id=record.id,  # type: ignore[arg-type]
        record_no=record.record_no,
        type=record.type.value,
        category=record.category,
        amount=str(record.amount),
        description=record.description,
        order_id=record.order_id,
        payment_id=record.payment_id,
        created_at=record.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
