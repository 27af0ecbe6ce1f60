"""Application service: Return Order use case (IN_USE -> RETURNED).

Returns are processed by staff who inspect the items.  A damaged return
books the repair cost as an EXPENSE and keeps the deposit; a clean one
refunds the settled deposit.
"""

from __future__ import annotations

import logging

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import OrderDTO, ReturnRequest, order_to_dto
from rentals.application.events import dispatch_events
from rentals.domain.exceptions import NotFoundError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ReturnOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        config: RentalConfig,
        publisher: EventPublisher,
    ) -> None:
        self._uow = uow
        self._config = config
        self._publisher = publisher

    def handle(self, auth: AuthContext, request: ReturnRequest) -> OrderDTO:
        require_roles(
            auth,
            self._config.admin_roles | self._config.auditor_roles,
            "process returns",
        )
        damage_amount = (
            Money.parse(request.damage_amount) if request.damage_amount else Money.zero()
        )

        with self._uow.transaction() as uow:
            order = uow.orders.get_by_id(request.order_id)
            if order is None:
                raise NotFoundError(f"Order #{request.order_id} not found")

            self._config.state_machine(uow).return_(
                order,
                return_date=request.return_date or self._config.today(),
                has_damage=request.has_damage,
                damage_amount=damage_amount,
                damage_description=request.damage_description,
            )
            order.append_remark("Return remark", request.return_remark)
            if request.has_damage:
                order.append_remark("Damage", request.damage_description or "reported")
            uow.orders.save(order)

        dispatch_events(self._uow, self._publisher)
        logger.info(
            "Order %s returned (damage=%s), processed by %s",
            order.order_no, request.has_damage, auth.user_id,
        )
        return order_to_dto(order)
