"""Unit of Work: the transaction boundary for every state change.

A unit of work bundles the repositories that take part in one atomic
operation.  ``transaction()`` is re-entrant: the outermost block owns
begin/commit/rollback, nested blocks join it.  Transactions on one unit
of work are serialized, which gives the shipped adapters the same
guarantees as SERIALIZABLE isolation.

Domain events recorded during a transaction are only released through
``collect_new_events()`` once it has committed; a rollback drops them.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from rentals.domain.model.events import OrderStatusChanged
from rentals.domain.repository.finance_record_repository import FinanceRecordRepository
from rentals.domain.repository.item_repository import ItemRepository
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.payment_repository import PaymentRepository


class UnitOfWork(ABC):

    items: ItemRepository
    orders: OrderRepository
    payments: PaymentRepository
    finance_records: FinanceRecordRepository

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self._pending_events: list[OrderStatusChanged] = []
        self._committed_events: dict[int, list[OrderStatusChanged]] = {}

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._pending_events = []
                self._begin()
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._pending_events = []
                    self._rollback()
                raise
            self._depth -= 1
            if outermost:
                self._commit()
                self._committed_events.setdefault(threading.get_ident(), []).extend(
                    self._pending_events
                )
                self._pending_events = []

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def record_event(self, event: OrderStatusChanged) -> None:
        self._pending_events.append(event)

    def collect_new_events(self) -> list[OrderStatusChanged]:
        """Return and forget the events this thread's transactions committed."""
        with self._lock:
            return self._committed_events.pop(threading.get_ident(), [])

    # --- Adapter hooks --------------------------------------------------------

    @abstractmethod
    def _begin(self) -> None:
        """Start a transaction (take a snapshot, open a DB transaction...)."""

    @abstractmethod
    def _commit(self) -> None:
        """Make every write since ``_begin`` durable."""

    @abstractmethod
    def _rollback(self) -> None:
        """Discard every write since ``_begin``."""
