"""JSON-file-backed, append-only finance ledger."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from pathlib import Path

from rentals.domain.model.finance import FinanceRecord, FinanceType
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.finance_record_repository import FinanceRecordRepository
from rentals.infrastructure.persistence.json_file import JsonFile


class JsonFinanceRecordRepository(FinanceRecordRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def add(self, record: FinanceRecord) -> FinanceRecord:
        rows = self._file.load()
        stored = dataclasses.replace(
            record, id=max((r["id"] for r in rows), default=0) + 1
        )
        rows.append(self._to_raw(stored))
        self._file.persist(rows)
        return stored

    def list_all(self) -> list[FinanceRecord]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def exists_by_record_no(self, record_no: str) -> bool:
        return any(raw["record_no"] == record_no for raw in self._file.load())

    @staticmethod
    def _to_raw(record: FinanceRecord) -> dict:
        return {
            "id": record.id,
            "record_no": record.record_no,
            "type": record.type.value,
            "category": record.category,
            "amount": str(record.amount.amount),
            "description": record.description,
            "order_id": record.order_id,
            "payment_id": record.payment_id,
            "created_at": record.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> FinanceRecord:
        return FinanceRecord(
            id=raw["id"],
            record_no=raw["record_no"],
            type=FinanceType(raw["type"]),
            category=raw["category"],
            amount=Money.of(raw["amount"]),
            description=raw["description"],
            order_id=raw.get("order_id"),
            payment_id=raw.get("payment_id"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
