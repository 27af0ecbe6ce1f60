"""Application service: catalog maintenance.

The catalog is owned elsewhere in production; these handlers exist so
the CLI can seed and adjust items locally.  Writes are admin-only.
"""

from __future__ import annotations

import logging

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import ItemDTO, item_to_dto
from rentals.domain.exceptions import NotFoundError, ValidationError
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.item import Item, ItemStatus
from rentals.domain.model.value_objects import Money
from rentals.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AddItemHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self, auth: AuthContext, name: str, price_per_day: str, deposit: str = "0"
    ) -> ItemDTO:
        require_roles(auth, self._config.admin_roles, "add catalog items")
        if not name.strip():
            raise ValidationError("Item name cannot be empty")
        price = Money.parse(price_per_day)
        if price.is_zero:
            raise ValidationError("Item price per day must be greater than zero")

        with self._uow.transaction() as uow:
            numeric = [int(i.id) for i in uow.items.list_all() if i.id.isdigit()]
            item = Item(
                id=str(max(numeric, default=0) + 1),
                name=name.strip(),
                price_per_day=price,
                deposit=Money.parse(deposit),
            )
            uow.items.save(item)

        logger.info("Item %s '%s' added at %s/day", item.id, item.name, item.price_per_day)
        return item_to_dto(item)


class UpdateItemHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(
        self,
        auth: AuthContext,
        item_id: str,
        price_per_day: str | None = None,
        status: str | None = None,
    ) -> ItemDTO:
        require_roles(auth, self._config.admin_roles, "change catalog items")

        with self._uow.transaction() as uow:
            item = uow.items.get_for_update(item_id)
            if item is None:
                raise NotFoundError(f"Item '{item_id}' not found")
            if price_per_day is not None:
                item.update_price(Money.parse(price_per_day))
            if status is not None:
                try:
                    new_status = ItemStatus(status.strip().upper())
                except ValueError as exc:
                    raise ValidationError(f"Unknown item status '{status}'") from exc
                item.set_catalog_status(new_status)
            uow.items.save(item)

        logger.info("Item %s updated: %s/day, %s", item.id, item.price_per_day, item.status.value)
        return item_to_dto(item)


class ListItemsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[ItemDTO]:
        items = sorted(self._uow.items.list_all(), key=lambda i: (len(i.id), i.id))
        return [item_to_dto(i) for i in items]
