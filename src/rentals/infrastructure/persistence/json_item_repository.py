"""JSON-file-backed implementation of ItemRepository."""

from __future__ import annotations

from pathlib import Path

from rentals.domain.model.item import Item, ItemStatus
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.item_repository import ItemRepository
from rentals.infrastructure.persistence.json_file import JsonFile


class JsonItemRepository(ItemRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ItemRepository interface ---------------------------------------------

    def get_by_id(self, item_id: str) -> Item | None:
        for raw in self._file.load():
            if raw["id"] == item_id:
                return self._to_domain(raw)
        return None

    def get_for_update(self, item_id: str) -> Item | None:
        # Transactions on the JSON store are already serialized.
        return self.get_by_id(item_id)

    def list_all(self) -> list[Item]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, item: Item) -> None:
        self._file.upsert(self._to_raw(item))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: Item) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "price_per_day": str(item.price_per_day.amount),
            "deposit": str(item.deposit.amount),
            "status": item.status.value,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Item:
        return Item(
            id=str(raw["id"]),
            name=raw["name"],
            price_per_day=Money.of(raw["price_per_day"]),
            deposit=Money.of(raw.get("deposit", "0")),
            status=ItemStatus(raw.get("status", ItemStatus.AVAILABLE.value)),
        )
