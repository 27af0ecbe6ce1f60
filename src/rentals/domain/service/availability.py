"""Domain service: Availability Checker.

Decides whether an item is free for a date range given the orders that
already hold it.  The overlap rule itself is a pair of plain functions
so it can be exercised without any repository.

Only CONFIRMED, PAID and IN_USE orders hold an item.  A PENDING order is
a soft hold: two renters may both reach PENDING for the same range, and
the first one approved wins (the recheck in the audit step).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from rentals.domain.model.order import BLOCKING_STATUSES, Order
from rentals.domain.repository.order_repository import OrderRepository


def ranges_overlap(
    existing_start: date, existing_end: date, requested_start: date, requested_end: date
) -> bool:
    """Closed-interval overlap of two inclusive date ranges."""
    return existing_start <= requested_end and existing_end >= requested_start


def blocks(
    order: Order,
    item_id: str,
    start_date: date,
    end_date: date,
    exclude_order_id: int | None = None,
) -> bool:
    """True if *order* holds *item_id* somewhere inside the requested range."""
    if exclude_order_id is not None and order.id == exclude_order_id:
        return False
    if order.status not in BLOCKING_STATUSES:
        return False
    if not order.holds(item_id):
        return False
    return ranges_overlap(order.start_date, order.end_date, start_date, end_date)


@dataclass(frozen=True)
class Conflict:
    item_id: str
    order_id: int | None
    order_no: str


class AvailabilityChecker:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def find_conflict(
        self,
        item_id: str,
        start_date: date,
        end_date: date,
        exclude_order_id: int | None = None,
    ) -> Conflict | None:
        for order in self._order_repo.list_by_item_id(item_id):
            if blocks(order, item_id, start_date, end_date, exclude_order_id):
                return Conflict(item_id=item_id, order_id=order.id, order_no=order.order_no)
        return None

    def has_conflict(
        self,
        item_id: str,
        start_date: date,
        end_date: date,
        exclude_order_id: int | None = None,
    ) -> bool:
        return self.find_conflict(item_id, start_date, end_date, exclude_order_id) is not None

    def first_conflict(
        self,
        item_ids: list[str],
        start_date: date,
        end_date: date,
        exclude_order_id: int | None = None,
    ) -> Conflict | None:
        """Check items in order and stop at the first one that is taken."""
        for item_id in item_ids:
            conflict = self.find_conflict(item_id, start_date, end_date, exclude_order_id)
            if conflict is not None:
                return conflict
        return None
