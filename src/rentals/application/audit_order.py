"""Application service: Audit Order use case.

Approval is the authoritative availability check: the order's items are
locked and re-checked against every order that got approved meanwhile.
Rejection cancels the order and refunds anything already settled.
"""

from __future__ import annotations

import logging

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, order_to_dto
from rentals.application.events import dispatch_events
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AuditOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        config: RentalConfig,
        publisher: EventPublisher,
    ) -> None:
        self._uow = uow
        self._config = config
        self._publisher = publisher

    def handle(
        self,
        auth: AuthContext,
        order_id: int,
        approved: bool,
        comment: str = "",
    ) -> OrderDTO:
        require_roles(auth, self._config.auditor_roles, "audit orders")

        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            machine = self._config.state_machine(uow)
            if approved:
                machine.approve(order)
            else:
                machine.reject(order, comment)
            order.append_remark("Audit", comment)
            uow.orders.save(order)

        dispatch_events(self._uow, self._publisher)
        logger.info(
            "Order %s audited by %s: %s",
            order.order_no, auth.user_id, "approved" if approved else "rejected",
        )
        return order_to_dto(order)
