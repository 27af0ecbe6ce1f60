"""Integration tests for the catalog maintenance handlers."""

import pytest

from rentals.application.manage_items import (
    AddItemHandler,
    ListItemsHandler,
    UpdateItemHandler,
)
from rentals.domain.exceptions import NotFoundError, UnauthorizedError, ValidationError
from tests.application.helpers import ADMIN, ALICE, Shop


class TestAddItem:

    def test_ids_continue_after_existing(self):
        shop = Shop()
        dto = AddItemHandler(shop.uow, shop.config).handle(ADMIN, "Drone", "300", "500")
        assert dto.id == "3"
        assert dto.price_per_day == "300.00"
        assert dto.deposit == "500.00"
        assert dto.status == "AVAILABLE"

    def test_zero_price_rejected(self):
        shop = Shop()
        with pytest.raises(ValidationError, match="greater than zero"):
            AddItemHandler(shop.uow, shop.config).handle(ADMIN, "Drone", "0")

    def test_sub_cent_price_rejected(self):
        shop = Shop()
        with pytest.raises(ValidationError, match="more than two decimal places"):
            AddItemHandler(shop.uow, shop.config).handle(ADMIN, "Drone", "10.005")
        assert shop.uow.items.get_by_id("3") is None

    def test_admin_only(self):
        shop = Shop()
        with pytest.raises(UnauthorizedError):
            AddItemHandler(shop.uow, shop.config).handle(ALICE, "Drone", "300")


class TestUpdateItem:

    def test_price_and_status(self):
        shop = Shop()
        dto = UpdateItemHandler(shop.uow, shop.config).handle(
            ADMIN, "2", price_per_day="25.00", status="maintenance"
        )
        assert (dto.price_per_day, dto.status) == ("25.00", "MAINTENANCE")

    def test_unknown_status(self):
        shop = Shop()
        with pytest.raises(ValidationError, match="Unknown item status"):
            UpdateItemHandler(shop.uow, shop.config).handle(ADMIN, "2", status="LOST")

    def test_missing_item(self):
        shop = Shop()
        with pytest.raises(NotFoundError):
            UpdateItemHandler(shop.uow, shop.config).handle(ADMIN, "99", price_per_day="1")


class TestListItems:

    def test_sorted_by_id(self):
        shop = Shop()
        AddItemHandler(shop.uow, shop.config).handle(ADMIN, "Drone", "300")
        assert [i.id for i in ListItemsHandler(shop.uow).handle()] == ["1", "2", "3"]
