"""Unit tests for the Order aggregate and its transition table."""

from datetime import date

import pytest

from rentals.domain.exceptions import (
    IllegalStateError,
    InvalidRangeError,
    ValidationError,
)
from rentals.domain.model.order import (
    TRANSITIONS,
    Order,
    OrderEvent,
    OrderItem,
    OrderStatus,
)
from rentals.domain.model.value_objects import DateRange, Money, Quantity


def _line(item_id: str = "1", qty: int = 1, price: str = "150.00") -> OrderItem:
    """Helper to build a valid line priced for three days."""
    unit = Money.of(price)
    return OrderItem(
        item_id=item_id,
        item_name=f"Item {item_id}",
        quantity=Quantity(qty),
        price_per_day=unit,
        total_amount=unit * qty * 3,
    )


def _order(*lines: OrderItem) -> Order:
    return Order.create(
        order_no="ORD1",
        user_id="alice",
        period=DateRange(date(2024, 1, 1), date(2024, 1, 4)),
        items=list(lines) or [_line()],
        deposit_amount=Money.zero(),
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = _order(_line(qty=2, price="10.00"))
        assert order.status == OrderStatus.PENDING
        assert order.id is None  # assigned by repository
        assert order.total_amount == Money.of("60.00")
        assert order.rental_days == 3

    def test_total_is_sum_of_lines(self):
        order = _order(_line("1", 1, "150.00"), _line("2", 2, "20.00"))
        assert order.total_amount == Money.of("570.00")

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("ORD1", "alice", DateRange(date(2024, 1, 1), date(2024, 1, 4)),
                         [], Money.zero())

    def test_duplicate_item_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            _order(_line("1"), _line("1"))

    def test_max_items(self):
        lines = [_line(str(i)) for i in range(3)]
        with pytest.raises(ValidationError, match="Maximum 2 items"):
            Order.create("ORD1", "alice", DateRange(date(2024, 1, 1), date(2024, 1, 4)),
                         lines, Money.zero(), max_items=2)

    def test_owner_required(self):
        with pytest.raises(ValidationError, match="belong to a user"):
            Order.create("ORD1", "", DateRange(date(2024, 1, 1), date(2024, 1, 4)),
                         [_line()], Money.zero())


class TestTransitions:

    @pytest.mark.parametrize("event", list(OrderEvent))
    def test_every_event_from_every_state(self, event):
        sources, target = TRANSITIONS[event]
        for status in OrderStatus:
            order = _order()
            order.status = status
            if status in sources:
                assert order.apply(event) == status
                assert order.status == target
            else:
                with pytest.raises(IllegalStateError) as exc_info:
                    order.apply(event)
                assert exc_info.value.current == status.value
                assert exc_info.value.requested == target.value
                assert order.status == status

    def test_happy_path_to_returned(self):
        order = _order()
        for event in (OrderEvent.APPROVE, OrderEvent.PAY, OrderEvent.START_USE,
                      OrderEvent.RETURN):
            order.apply(event)
        assert order.status == OrderStatus.RETURNED
        assert order.is_terminal
        assert order.is_paid

    def test_cancel_from_paid_is_illegal(self):
        order = _order()
        order.apply(OrderEvent.APPROVE)
        order.apply(OrderEvent.PAY)
        with pytest.raises(IllegalStateError, match="from PAID to CANCELLED"):
            order.apply(OrderEvent.CANCEL)

    def test_reject_from_paid_is_allowed(self):
        order = _order()
        order.apply(OrderEvent.APPROVE)
        order.apply(OrderEvent.PAY)
        assert order.apply(OrderEvent.REJECT) == OrderStatus.PAID
        assert order.status == OrderStatus.CANCELLED


class TestRemarksAndReturn:

    def test_remarks_append_labelled_lines(self):
        order = _order()
        order.append_remark("Audit", "looks fine")
        order.append_remark("Cancel reason", "  ")
        order.append_remark("Cancel reason", "changed plans")
        assert order.remark == "Audit: looks fine\nCancel reason: changed plans"

    def test_return_before_start_rejected(self):
        with pytest.raises(InvalidRangeError):
            _order().record_return(date(2023, 12, 31))

    def test_reschedule_only_while_pending(self):
        order = _order()
        order.apply(OrderEvent.APPROVE)
        with pytest.raises(IllegalStateError):
            order.reschedule(DateRange(date(2024, 2, 1), date(2024, 2, 3)), [_line()])
