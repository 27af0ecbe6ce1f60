"""Shared wiring for the application tests: one fake store, all handlers."""

from __future__ import annotations

from datetime import date

from rentals.application.audit_order import AuditOrderHandler
from rentals.application.config import RentalConfig
from rentals.application.create_order import CreateOrderHandler
from rentals.application.dto import OrderDTO, OrderItemSpec
from rentals.application.link_payment import LinkPaymentHandler
from rentals.application.payment_callback import PaymentCallbackHandler
from rentals.domain.model.auth import AuthContext
from tests.fakes import FakeUnitOfWork, RecordingEventPublisher, make_config, make_item

ALICE = AuthContext.of("alice")
BOB = AuthContext.of("bob")
AUDITOR = AuthContext.of("carol", "ORDER_AUDIT")
ADMIN = AuthContext.of("root", "ADMIN")
FINANCE = AuthContext.of("fiona", "PAYMENT_REFUND")

JAN_1, JAN_4 = date(2024, 1, 1), date(2024, 1, 4)


class Shop:
    """A fake store with a small catalog and helpers to move orders along."""

    def __init__(self, today: date | None = None, publisher=None) -> None:
        self.uow = FakeUnitOfWork([
            make_item("1", "Camera", "150.00", deposit="200.00"),
            make_item("2", "Tripod", "20.00"),
        ])
        self.config: RentalConfig = make_config(today)
        self.publisher = publisher or RecordingEventPublisher()

    def create(
        self, auth: AuthContext = ALICE, start: date = JAN_1, end: date = JAN_4,
        items: list[OrderItemSpec] | None = None,
    ) -> OrderDTO:
        return CreateOrderHandler(self.uow, self.config).handle(
            auth, start, end, items or [OrderItemSpec("1", 1)]
        )

    def approve(self, order_id: int, auth: AuthContext = AUDITOR) -> OrderDTO:
        return AuditOrderHandler(self.uow, self.config, self.publisher).handle(
            auth, order_id, approved=True, comment="ok"
        )

    def pay(self, order_id: int, amount: str, txn: str, type: str = "RENTAL") -> str:
        dto = LinkPaymentHandler(self.uow, self.config).handle(
            FINANCE, order_id, amount, "ALIPAY", type
        )
        self.callback(dto.payment_no, "TRADE_SUCCESS", txn)
        return dto.payment_no

    def callback(self, payment_no: str, status: str, txn: str | None):
        return PaymentCallbackHandler(self.uow, self.config, self.publisher).handle(
            payment_no, status, txn
        )

    def paid_order(self, deposit: bool = True) -> OrderDTO:
        dto = self.approve(self.create().id)
        if deposit:
            self.pay(dto.id, dto.deposit_amount, "DEP-1", "DEPOSIT")
        self.pay(dto.id, dto.total_amount, "RENT-1")
        return dto

    def order(self, order_id: int):
        return self.uow.orders.get_by_id(order_id)
