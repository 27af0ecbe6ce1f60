"""Application service: Update Order use case.

A PENDING order may still be rescheduled.  Lines keep the price captured
at booking time and are re-priced for the new range; the availability
check skips the order itself.
"""

from __future__ import annotations

import logging
from datetime import date

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.domain.exceptions import ItemUnavailableError, NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.order import OrderItem
from rentals.domain.model.value_objects import DateRange
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.availability import AvailabilityChecker
from rentals.domain.service.pricing import PricedLine, compute_total

logger = logging.getLogger(__name__)


class UpdateOrderHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self,
        auth: AuthContext,
        order_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        remark: str | None = None,
    ) -> OrderDTO:
        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            require_owner_or_roles(
                auth, order.user_id, self._config.admin_roles, "update this order"
            )
            order.ensure_reschedulable()

            period = DateRange(start_date or order.start_date, end_date or order.end_date)
            checker = AvailabilityChecker(uow.orders)
            for item_id in sorted(order.item_ids):
                item = uow.items.get_for_update(item_id)
                if item is None:
                    raise NotFoundError(f"Item '{item_id}' not found")
                conflict = checker.find_conflict(
                    item_id, period.start, period.end, exclude_order_id=order.id
                )
                if conflict is not None:
                    raise ItemUnavailableError(
                        item_id,
                        f"Item '{item.name}' is already booked by order "
                        f"{conflict.order_no} within {period}",
                    )

            quote = compute_total(
                [PricedLine(line.price_per_day, line.quantity) for line in order.items],
                period.start,
                period.end,
            )
            lines = [
                OrderItem(
                    item_id=line.item_id,
                    item_name=line.item_name,
                    quantity=line.quantity,
                    price_per_day=line.price_per_day,
                    total_amount=line_total,
                    id=line.id,
                    order_id=order.id,
                )
                for line, line_total in zip(order.items, quote.line_totals)
            ]
            order.reschedule(period, lines, max_items=self._config.max_order_items)
            if remark is not None:
                order.remark = remark.strip()
            order.touch(self._config.now())
            uow.orders.save(order)

        logger.info(
            "Order %s rescheduled to %s by %s (total %s)",
            order.order_no, period, auth.user_id, order.total_amount,
        )
        return order_to_dto(order)
