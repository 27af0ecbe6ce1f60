"""Application service: Cancel Order use case.

Only the renter who placed the order (or an administrator) may cancel,
and only while it is PENDING or CONFIRMED.  Items were never handed out
at that point, so their status is left alone.
"""

from __future__ import annotations

import logging

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.application.events import dispatch_events
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        config: RentalConfig,
        publisher: EventPublisher,
    ) -> None:
        self._uow = uow
        self._config = config
        self._publisher = publisher

    def handle(self, auth: AuthContext, order_id: int, reason: str = "") -> OrderDTO:
        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            require_owner_or_roles(
                auth, order.user_id, self._config.admin_roles, "cancel this order"
            )

            self._config.state_machine(uow).cancel(order, reason)
            order.append_remark("Cancel reason", reason)
            uow.orders.save(order)

        dispatch_events(self._uow, self._publisher)
        logger.info("Order %s cancelled by %s", order.order_no, auth.user_id)
        return order_to_dto(order)
