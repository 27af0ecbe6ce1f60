"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from rentals.domain.model.order import Order, OrderItem, OrderStatus
from rentals.domain.model.value_objects import Money, Quantity
from rentals.domain.repository.order_repository import OrderRepository
from rentals.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        return self._file.next_id()

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_order_no(self, order_no: str) -> Order | None:
        for raw in self._file.load():
            if raw["order_no"] == order_no:
                return self._to_domain(raw)
        return None

    def list_by_item_id(self, item_id: str) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if any(line["item_id"] == item_id for line in raw["items"])
        ]

    def list_by_user_id(self, user_id: str) -> list[Order]:
        return [self._to_domain(r) for r in self._file.load() if r["user_id"] == user_id]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return [
            self._to_domain(r) for r in self._file.load() if r["status"] == status.value
        ]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
        for index, line in enumerate(order.items, start=1):
            line.order_id = order.id
            if line.id is None:
                line.id = index
        self._file.upsert(self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_no": order.order_no,
            "user_id": order.user_id,
            "status": order.status.value,
            "start_date": order.start_date.isoformat(),
            "end_date": order.end_date.isoformat(),
            "deposit_amount": str(order.deposit_amount.amount),
            "actual_return_date": (
                order.actual_return_date.isoformat() if order.actual_return_date else None
            ),
            "remark": order.remark,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "items": [
                {
                    "id": line.id,
                    "item_id": line.item_id,
                    "item_name": line.item_name,
                    "quantity": line.quantity.value,
                    "price_per_day": str(line.price_per_day.amount),
                    "total_amount": str(line.total_amount.amount),
                }
                for line in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                item_id=i["item_id"],
                item_name=i["item_name"],
                quantity=Quantity(i["quantity"]),
                price_per_day=Money.of(i["price_per_day"]),
                total_amount=Money.of(i["total_amount"]),
                id=i.get("id"),
                order_id=raw["id"],
            )
            for i in raw["items"]
        ]
        returned = raw.get("actual_return_date")
        return Order(
            id=raw["id"],
            order_no=raw["order_no"],
            user_id=raw["user_id"],
            start_date=date.fromisoformat(raw["start_date"]),
            end_date=date.fromisoformat(raw["end_date"]),
            items=items,
            status=OrderStatus(raw["status"]),
            deposit_amount=Money.of(raw.get("deposit_amount", "0")),
            actual_return_date=date.fromisoformat(returned) if returned else None,
            remark=raw.get("remark", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
