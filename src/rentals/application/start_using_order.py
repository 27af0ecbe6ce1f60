"""Application service: Start Using Order use case (PAID -> IN_USE)."""

from __future__ import annotations

import logging

from rentals.application.authorization import require_owner_or_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.application.events import dispatch_events
from rentals.domain.exceptions import InvalidRangeError, NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.order import OrderStatus
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class StartUsingOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        config: RentalConfig,
        publisher: EventPublisher,
    ) -> None:
        self._uow = uow
        self._config = config
        self._publisher = publisher

    def handle(self, auth: AuthContext, order_id: int) -> OrderDTO:
        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            require_owner_or_roles(
                auth, order.user_id, self._config.admin_roles, "start this rental"
            )

            today = self._config.today()
            if order.status == OrderStatus.PAID and order.start_date > today:
                raise InvalidRangeError(
                    f"Order {order.order_no} starts on {order.start_date.isoformat()}, "
                    f"it cannot be picked up on {today.isoformat()}"
                )
            self._config.state_machine(uow).start_use(order)

        dispatch_events(self._uow, self._publisher)
        logger.info("Order %s picked up by %s", order.order_no, auth.user_id)
        return order_to_dto(order)
