"""Application service: Payment Gateway Callback.

Entry point for verified gateway notifications.  Settlement and the
PAY transition it may trigger commit together; a replayed notification
is answered with the payment as it already stands.
"""

from __future__ import annotations

import logging

from rentals.application.config import RentalConfig
from rentals.application.dto import PaymentDTO, payment_to_dto
from rentals.application.events import dispatch_events
from rentals.domain.exceptions import NotFoundError
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PaymentCallbackHandler:

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
        payment_no: str,
        status: str,
        transaction_id: str | None = None,
    ) -> PaymentDTO:
        with self._uow.transaction() as uow:
            settlement = self._config.reconciler(uow).apply_gateway_result(
                payment_no, status, transaction_id
            )
            if settlement.order_covered:
                order = uow.orders.get_by_id(settlement.payment.order_id)
                if order is None:
                    raise NotFoundError(f"Order #{settlement.payment.order_id} not found")
                self._config.state_machine(uow).pay(order)

        dispatch_events(self._uow, self._publisher)
        if settlement.duplicate:
            logger.info("Callback for %s was already applied", payment_no)
        return payment_to_dto(settlement.payment)
