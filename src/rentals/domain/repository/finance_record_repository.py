"""Abstract repository for the append-only finance ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.finance import FinanceRecord


class FinanceRecordRepository(ABC):

    @abstractmethod
    def add(self, record: FinanceRecord) -> FinanceRecord:
        """Append a record and return it with its assigned ID."""

    @abstractmethod
    def list_all(self) -> list[FinanceRecord]:
        """Return every ledger entry in insertion order."""

    @abstractmethod
    def exists_by_record_no(self, record_no: str) -> bool:
        """Return True if *record_no* is already taken."""

    def list_by_order_id(self, order_id: int) -> list[FinanceRecord]:
        return [r for r in self.list_all() if r.order_id == order_id]

    def list_by_payment_id(self, payment_id: int) -> list[FinanceRecord]:
        return [r for r in self.list_all() if r.payment_id == payment_id]
