"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items. Its status only
moves through the transition table below; side effects on items, payments
and the ledger are coordinated by ``OrderStateMachine``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from rentals.domain.exceptions import (
    IllegalStateError,
    InvalidRangeError,
    ValidationError,
)
from rentals.domain.model.value_objects import DateRange, Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    IN_USE = "IN_USE"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


class OrderEvent(Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    PAY = "PAY"
    START_USE = "START_USE"
    RETURN = "RETURN"


# Orders in these states hold their items for the booked range.
BLOCKING_STATUSES = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PAID, OrderStatus.IN_USE}
)
TERMINAL_STATUSES = frozenset({OrderStatus.RETURNED, OrderStatus.CANCELLED})

# event -> (allowed source states, target state)
TRANSITIONS: dict[OrderEvent, tuple[frozenset[OrderStatus], OrderStatus]] = {
    OrderEvent.APPROVE: (frozenset({OrderStatus.PENDING}), OrderStatus.CONFIRMED),
    OrderEvent.CANCEL: (
        frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED}),
        OrderStatus.CANCELLED,
    ),
    OrderEvent.REJECT: (
        frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PAID}),
        OrderStatus.CANCELLED,
    ),
    OrderEvent.PAY: (frozenset({OrderStatus.CONFIRMED}), OrderStatus.PAID),
    OrderEvent.START_USE: (frozenset({OrderStatus.PAID}), OrderStatus.IN_USE),
    OrderEvent.RETURN: (frozenset({OrderStatus.IN_USE}), OrderStatus.RETURNED),
}


@dataclass
class OrderItem:
    """One booked line: an item, a quantity and the price snapshot.

    ``price_per_day`` is copied from the catalog at booking time and never
    follows later price changes.
    """

    item_id: str
    item_name: str
    quantity: Quantity
    price_per_day: Money
    total_amount: Money
    id: int | None = None
    order_id: int | None = None


@dataclass
class Order:
    """Aggregate root for rental orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_no: str
    user_id: str
    start_date: date
    end_date: date
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.PENDING
    deposit_amount: Money = field(default_factory=Money.zero)
    actual_return_date: date | None = None
    remark: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_no: str,
        user_id: str,
        period: DateRange,
        items: list[OrderItem],
        deposit_amount: Money,
        remark: str = "",
        max_items: int = 50,
    ) -> Order:
        """Create a new PENDING order, enforcing all invariants."""
        if not user_id:
            raise ValidationError("Order must belong to a user")
        _validate_lines(items, max_items)
        return Order(
            id=None,
            order_no=order_no,
            user_id=user_id,
            start_date=period.start,
            end_date=period.end,
            items=list(items),
            deposit_amount=deposit_amount,
            remark=remark.strip(),
        )

    # --- State transitions ----------------------------------------------------

    def apply(self, event: OrderEvent, at: datetime | None = None) -> OrderStatus:
        """Move to the state *event* leads to and return the previous state.

        Raises IllegalStateError when the current state has no such event.
        """
        sources, target = TRANSITIONS[event]
        if self.status not in sources:
            raise IllegalStateError(
                f"Order {self.order_no}", self.status.value, target.value
            )
        previous = self.status
        self.status = target
        self.touch(at)
        return previous

    def record_return(self, return_date: date) -> None:
        if return_date < self.start_date:
            raise InvalidRangeError(
                f"Return date {return_date.isoformat()} is before the rental start"
            )
        self.actual_return_date = return_date

    def ensure_reschedulable(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise IllegalStateError(
                f"Order {self.order_no}", self.status.value, "PENDING (update)"
            )

    def reschedule(
        self, period: DateRange, items: list[OrderItem], max_items: int = 50
    ) -> None:
        """Replace dates and re-priced lines of a PENDING order."""
        self.ensure_reschedulable()
        _validate_lines(items, max_items)
        self.start_date = period.start
        self.end_date = period.end
        self.items = list(items)
        for line in self.items:
            line.order_id = self.id

    def append_remark(self, label: str, text: str | None) -> None:
        """Append a labelled remark line; allowed in every state."""
        if text is None or not text.strip():
            return
        line = f"{label}: {text.strip()}"
        self.remark = f"{self.remark}\n{line}" if self.remark else line

    def touch(self, at: datetime | None = None) -> None:
        self.updated_at = at or datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def total_amount(self) -> Money:
        return Money.total([item.total_amount for item in self.items])

    @property
    def period(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def rental_days(self) -> int:
        return self.period.days

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.status in (OrderStatus.PAID, OrderStatus.IN_USE, OrderStatus.RETURNED)

    @property
    def item_ids(self) -> list[str]:
        return [line.item_id for line in self.items]

    def holds(self, item_id: str) -> bool:
        return any(line.item_id == item_id for line in self.items)


def _validate_lines(items: list[OrderItem], max_items: int) -> None:
    if not items:
        raise ValidationError("Order must contain at least one item")
    if len(items) > max_items:
        raise ValidationError(f"Maximum {max_items} items per order")
    seen: set[str] = set()
    for line in items:
        if line.item_id in seen:
            raise ValidationError(
                f"Item '{line.item_name}' is listed more than once"
            )
        seen.add(line.item_id)
