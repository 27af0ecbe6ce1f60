"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.
``FakeUnitOfWork`` snapshots every store when a transaction begins and
puts the snapshot back on rollback.
"""

from __future__ import annotations

import copy
import dataclasses
from datetime import date, datetime, timezone

from rentals.application.config import RentalConfig
from rentals.domain.model.events import OrderStatusChanged
from rentals.domain.model.finance import FinanceRecord
from rentals.domain.model.item import Item
from rentals.domain.model.order import Order, OrderStatus
from rentals.domain.model.payment import Payment
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.event_publisher import EventPublisher
from rentals.domain.repository.finance_record_repository import FinanceRecordRepository
from rentals.domain.repository.item_repository import ItemRepository
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.payment_repository import PaymentRepository
from rentals.domain.repository.unit_of_work import UnitOfWork

NOW = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def fixed_clock(at: datetime = NOW):
    return lambda: at


def make_config(today: date | None = None, **overrides) -> RentalConfig:
    at = NOW if today is None else datetime(
        today.year, today.month, today.day, 9, 0, tzinfo=timezone.utc
    )
    return RentalConfig(clock=fixed_clock(at), **overrides)


def make_item(
    item_id: str = "1",
    name: str = "Camera",
    price: str = "150.00",
    deposit: str = "0",
) -> Item:
    return Item(
        id=item_id, name=name, price_per_day=Money.of(price), deposit=Money.of(deposit)
    )


class FakeItemRepository(ItemRepository):

    def __init__(self, items: list[Item] | None = None) -> None:
        self._store: dict[str, Item] = {}
        for item in items or []:
            self._store[item.id] = item

    def get_by_id(self, item_id: str) -> Item | None:
        return self._store.get(item_id)

    def get_for_update(self, item_id: str) -> Item | None:
        return self._store.get(item_id)

    def list_all(self) -> list[Item]:
        return list(self._store.values())

    def save(self, item: Item) -> None:
        self._store[item.id] = item


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1

    def next_id(self) -> int:
        return self._next_id

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def get_by_order_no(self, order_no: str) -> Order | None:
        for order in self._store.values():
            if order.order_no == order_no:
                return order
        return None

    def list_by_item_id(self, item_id: str) -> list[Order]:
        return [o for o in self._store.values() if o.holds(item_id)]

    def list_by_user_id(self, user_id: str) -> list[Order]:
        return [o for o in self._store.values() if o.user_id == user_id]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return [o for o in self._store.values() if o.status == status]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._next_id
            self._next_id += 1
        for line in order.items:
            line.order_id = order.id
        self._store[order.id] = order


class FakePaymentRepository(PaymentRepository):

    def __init__(self) -> None:
        self._store: dict[int, Payment] = {}
        self._next_id = 1

    def get_by_id(self, payment_id: int) -> Payment | None:
        return self._store.get(payment_id)

    def get_by_payment_no(self, payment_no: str) -> Payment | None:
        for p in self._store.values():
            if p.payment_no == payment_no:
                return p
        return None

    def get_by_transaction_id(self, transaction_id: str) -> Payment | None:
        for p in self._store.values():
            if p.third_party_transaction_id == transaction_id:
                return p
        return None

    def list_by_order_id(self, order_id: int) -> list[Payment]:
        return [p for p in self._store.values() if p.order_id == order_id]

    def save(self, payment: Payment) -> None:
        if payment.id is None:
            payment.id = self._next_id
            self._next_id += 1
        self._store[payment.id] = payment


class FakeFinanceRecordRepository(FinanceRecordRepository):

    def __init__(self) -> None:
        self._store: dict[int, FinanceRecord] = {}
        self._next_id = 1

    def add(self, record: FinanceRecord) -> FinanceRecord:
        stored = dataclasses.replace(record, id=self._next_id)
        self._store[stored.id] = stored
        self._next_id += 1
        return stored

    def list_all(self) -> list[FinanceRecord]:
        return list(self._store.values())

    def exists_by_record_no(self, record_no: str) -> bool:
        return any(r.record_no == record_no for r in self._store.values())


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, items: list[Item] | None = None) -> None:
        super().__init__()
        self.items = FakeItemRepository(items)
        self.orders = FakeOrderRepository()
        self.payments = FakePaymentRepository()
        self.finance_records = FakeFinanceRecordRepository()
        self._snapshot: list[tuple[object, dict]] = []
        self.commits = 0
        self.rollbacks = 0

    def _repos(self) -> list[object]:
        return [self.items, self.orders, self.payments, self.finance_records]

    def _begin(self) -> None:
        self._snapshot = [(repo, copy.deepcopy(vars(repo))) for repo in self._repos()]

    def _commit(self) -> None:
        self._snapshot = []
        self.commits += 1

    def _rollback(self) -> None:
        for repo, state in self._snapshot:
            vars(repo).clear()
            vars(repo).update(state)
        self._snapshot = []
        self.rollbacks += 1


class RecordingEventPublisher(EventPublisher):

    def __init__(self, fail: bool = False) -> None:
        self.events: list[OrderStatusChanged] = []
        self._fail = fail

    def publish(self, event: OrderStatusChanged) -> None:
        if self._fail:
            raise ConnectionError("notification service unreachable")
        self.events.append(event)

    @property
    def transitions(self) -> list[tuple[str, str]]:
        return [(e.old_status.value, e.new_status.value) for e in self.events]
