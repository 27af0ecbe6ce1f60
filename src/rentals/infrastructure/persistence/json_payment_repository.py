"""JSON-file-backed implementation of PaymentRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rentals.domain.model.payment import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.payment_repository import PaymentRepository
from rentals.infrastructure.persistence.json_file import JsonFile


class JsonPaymentRepository(PaymentRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, payment_id: int) -> Payment | None:
        return self._find("id", payment_id)

    def get_by_payment_no(self, payment_no: str) -> Payment | None:
        return self._find("payment_no", payment_no)

    def get_by_transaction_id(self, transaction_id: str) -> Payment | None:
        return self._find("third_party_transaction_id", transaction_id)

    def list_by_order_id(self, order_id: int) -> list[Payment]:
        return [
            self._to_domain(r) for r in self._file.load() if r["order_id"] == order_id
        ]

    def save(self, payment: Payment) -> None:
        if payment.id is None:
            payment.id = self._file.next_id()
        self._file.upsert(self._to_raw(payment))

    def _find(self, key: str, value: object) -> Payment | None:
        for raw in self._file.load():
            if raw.get(key) == value:
                return self._to_domain(raw)
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(payment: Payment) -> dict:
        return {
            "id": payment.id,
            "payment_no": payment.payment_no,
            "order_id": payment.order_id,
            "amount": str(payment.amount.amount),
            "method": payment.method.value,
            "type": payment.type.value,
            "status": payment.status.value,
            "third_party_transaction_id": payment.third_party_transaction_id,
            "refunded_payment_id": payment.refunded_payment_id,
            "reason": payment.reason,
            "created_at": payment.created_at.isoformat(),
            "updated_at": payment.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Payment:
        return Payment(
            id=raw["id"],
            payment_no=raw["payment_no"],
            order_id=raw["order_id"],
            amount=Money.of(raw["amount"]),
            method=PaymentMethod(raw["method"]),
            type=PaymentType(raw["type"]),
            status=PaymentStatus(raw["status"]),
            third_party_transaction_id=raw.get("third_party_transaction_id"),
            refunded_payment_id=raw.get("refunded_payment_id"),
            reason=raw.get("reason", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
