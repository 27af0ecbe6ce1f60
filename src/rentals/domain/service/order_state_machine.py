"""Domain service: Order State Machine.

``Order.apply()`` knows which status follows which; this service adds
what each transition does to the rest of the system:

- APPROVE   locks the order's items and re-runs the availability check
            (first approved wins).
- CANCEL /  refund whatever was already settled; a REJECT from PAID is
  REJECT    how an administrator unwinds a paid order.
- PAY       nothing beyond the status (the INCOME entry is written by the
            reconciler when the settling payment succeeds).
- START_USE marks every item RENTED.
- RETURN    records the return date, marks items AVAILABLE, then books a
            damage EXPENSE (deposit kept) or refunds the deposit.

Every method expects to run inside ``UnitOfWork.transaction()`` so a
failure at any step leaves nothing behind.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable

from rentals.domain.exceptions import ConflictError, NotFoundError
from rentals.domain.model.events import OrderStatusChanged
from rentals.domain.model.item import Item
from rentals.domain.model.order import Order, OrderEvent
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.availability import AvailabilityChecker
from rentals.domain.service.payment_reconciler import PaymentReconciler

logger = logging.getLogger(__name__)


class OrderStateMachine:

    def __init__(
        self,
        uow: UnitOfWork,
        reconciler: PaymentReconciler,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._reconciler = reconciler
        self._availability = AvailabilityChecker(uow.orders)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def approve(self, order: Order) -> None:
        self._lock_items(order)
        conflict = self._availability.first_conflict(
            order.item_ids, order.start_date, order.end_date, exclude_order_id=order.id
        )
        if conflict is not None:
            raise ConflictError(
                conflict.item_id,
                conflict.order_id,
                f"Item '{conflict.item_id}' was claimed by order {conflict.order_no} "
                f"for {order.period}",
            )
        self._fire(order, OrderEvent.APPROVE)

    def cancel(self, order: Order, reason: str) -> None:
        self._fire(order, OrderEvent.CANCEL)
        self._reconciler.refund_order(order, reason or "order cancelled")

    def reject(self, order: Order, reason: str) -> None:
        self._fire(order, OrderEvent.REJECT)
        self._reconciler.refund_order(order, reason or "order rejected")

    def pay(self, order: Order) -> None:
        self._lock_items(order)
        self._fire(order, OrderEvent.PAY)

    def start_use(self, order: Order) -> None:
        items = self._lock_items(order)
        self._fire(order, OrderEvent.START_USE)
        for item in items:
            item.mark_rented()
            self._uow.items.save(item)

    def return_(
        self,
        order: Order,
        return_date: date,
        has_damage: bool = False,
        damage_amount: Money | None = None,
        damage_description: str = "",
    ) -> None:
        items = self._lock_items(order)
        self._fire(order, OrderEvent.RETURN, save=False)
        order.record_return(return_date)
        self._uow.orders.save(order)
        for item in items:
            item.mark_returned()
            self._uow.items.save(item)

        if has_damage:
            self._reconciler.record_damage(
                order, damage_amount or Money.zero(), damage_description
            )
        else:
            self._reconciler.refund_deposit(order, "deposit returned")

    # --- Internal helpers -----------------------------------------------------

    def _fire(self, order: Order, event: OrderEvent, save: bool = True) -> None:
        now = self._clock()
        previous = order.apply(event, at=now)
        if save:
            self._uow.orders.save(order)
        self._uow.record_event(
            OrderStatusChanged(
                order_id=order.id,  # type: ignore[arg-type]
                order_no=order.order_no,
                old_status=previous,
                new_status=order.status,
                occurred_at=now,
            )
        )
        logger.info(
            "Order %s: %s -> %s", order.order_no, previous.value, order.status.value
        )

    def _lock_items(self, order: Order) -> list[Item]:
        # Always lock in item-id order.
        items: list[Item] = []
        for item_id in sorted(order.item_ids):
            item = self._uow.items.get_for_update(item_id)
            if item is None:
                raise NotFoundError(f"Item '{item_id}' not found")
            items.append(item)
        return items
