"""Abstract repository for the Item aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.item import Item


class ItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_for_update(self, item_id: str) -> Item | None:
        """Return an item and hold its row lock until the transaction ends.

        SQL adapters issue ``SELECT ... FOR UPDATE``; adapters whose
        transactions are already serialized may simply delegate to
        ``get_by_id``.
        """

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item in the catalog."""

    @abstractmethod
    def save(self, item: Item) -> None:
        """Persist a new or updated item."""
