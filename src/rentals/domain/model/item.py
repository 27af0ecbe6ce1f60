"""Item aggregate.

Items belong to the catalog and live independently of orders. The rental
engine only reads their price, deposit and status, and flips the status
between AVAILABLE and RENTED when an order starts or ends its use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rentals.domain.exceptions import ItemUnavailableError, ValidationError
from rentals.domain.model.value_objects import Money


class ItemStatus(Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    MAINTENANCE = "MAINTENANCE"
    REMOVED = "REMOVED"


@dataclass
class Item:
    """A rentable item in the catalog."""

    id: str
    name: str
    price_per_day: Money
    deposit: Money = field(default_factory=Money.zero)
    status: ItemStatus = ItemStatus.AVAILABLE

    @property
    def is_rentable(self) -> bool:
        return self.status == ItemStatus.AVAILABLE

    def update_price(self, new_price: Money) -> None:
        """Change the daily rate.

        This does NOT affect any existing orders because order lines
        capture a price snapshot at booking time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Item price per day must be greater than zero")
        self.price_per_day = new_price

    def set_catalog_status(self, status: ItemStatus) -> None:
        """Catalog-side status change (maintenance, removal, restock)."""
        if status == ItemStatus.RENTED:
            raise ValidationError("RENTED is set by the rental lifecycle only")
        if self.status == ItemStatus.RENTED:
            raise ValidationError(
                f"Item '{self.name}' is rented out and cannot change status"
            )
        self.status = status

    def mark_rented(self) -> None:
        if self.status in (ItemStatus.MAINTENANCE, ItemStatus.REMOVED):
            raise ItemUnavailableError(
                self.id,
                f"Item '{self.name}' is {self.status.value} and cannot be handed out",
            )
        self.status = ItemStatus.RENTED

    def mark_returned(self) -> None:
        if self.status == ItemStatus.RENTED:
            self.status = ItemStatus.AVAILABLE
