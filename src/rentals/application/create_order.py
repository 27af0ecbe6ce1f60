"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model.
Each requested item is locked, checked against the catalog and against
orders that already hold it, then priced; the order is stored PENDING.
"""

from __future__ import annotations

import logging
from datetime import date

from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from rentals.domain.exceptions import ItemUnavailableError, NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.item import Item
from rentals.domain.model.order import Order, OrderItem
from rentals.domain.model.value_objects import DateRange, Quantity
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.availability import AvailabilityChecker
from rentals.domain.service.numbering import generate_number
from rentals.domain.service.pricing import (
    PricedLine,
    compute_deposit,
    compute_total,
    rental_days,
)

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self,
        auth: AuthContext,
        start_date: date,
        end_date: date,
        item_specs: list[OrderItemSpec],
        remark: str = "",
    ) -> OrderDTO:
        """Create a new rental order for the calling user.

        Steps:
        1. Reject malformed ranges before touching any item.
        2. Lock and resolve each item (fail if missing or not AVAILABLE).
        3. Fail on the first item another order already holds.
        4. Price the lines with *current* rates (snapshot) and persist.
        """
        period = DateRange(start_date, end_date)
        rental_days(start_date, end_date)

        with self._uow.transaction() as uow:
            checker = AvailabilityChecker(uow.orders)
            booked: list[tuple[Item, Quantity]] = []

            for spec in item_specs:
                quantity = Quantity(spec.quantity)
                item = uow.items.get_for_update(spec.item_id)
                if item is None:
                    raise NotFoundError(f"Item '{spec.item_id}' not found")
                if not item.is_rentable:
                    raise ItemUnavailableError(
                        item.id, f"Item '{item.name}' is {item.status.value}"
                    )
                conflict = checker.find_conflict(item.id, start_date, end_date)
                if conflict is not None:
                    raise ItemUnavailableError(
                        item.id,
                        f"Item '{item.name}' is already booked by order "
                        f"{conflict.order_no} within {period}",
                    )
                booked.append((item, quantity))

            quote = compute_total(
                [PricedLine(item.price_per_day, qty) for item, qty in booked],
                start_date,
                end_date,
            )
            lines = [
                OrderItem(
                    item_id=item.id,
                    item_name=item.name,
                    quantity=qty,
                    price_per_day=item.price_per_day,  # <-- price snapshot
                    total_amount=line_total,
                )
                for (item, qty), line_total in zip(booked, quote.line_totals)
            ]

            order = Order.create(
                order_no=generate_number(
                    self._config.order_no_prefix,
                    uow.orders.exists_by_order_no,
                    self._config.now(),
                ),
                user_id=auth.user_id,
                period=period,
                items=lines,
                deposit_amount=compute_deposit([(item.deposit, qty) for item, qty in booked]),
                remark=remark,
                max_items=self._config.max_order_items,
            )
            order.created_at = order.updated_at = self._config.now()
            uow.orders.save(order)

        logger.info(
            "Order %s created by user %s: %d line(s), %s for %d day(s)",
            order.order_no, auth.user_id, len(lines), order.total_amount, quote.days,
        )
        return order_to_dto(order)
