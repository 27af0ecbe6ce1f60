"""Unit tests for the Item aggregate."""

import pytest

from rentals.domain.exceptions import ItemUnavailableError, ValidationError
from rentals.domain.model.item import ItemStatus
from rentals.domain.model.value_objects import Money
from tests.fakes import make_item


class TestItem:

    def test_new_item_is_rentable(self):
        assert make_item().is_rentable

    def test_update_price_requires_positive(self):
        item = make_item()
        with pytest.raises(ValidationError, match="greater than zero"):
            item.update_price(Money.zero())
        item.update_price(Money.of("99.00"))
        assert item.price_per_day == Money.of("99.00")

    def test_maintenance_item_cannot_be_handed_out(self):
        item = make_item()
        item.set_catalog_status(ItemStatus.MAINTENANCE)
        assert not item.is_rentable
        with pytest.raises(ItemUnavailableError) as exc_info:
            item.mark_rented()
        assert exc_info.value.item_id == item.id

    def test_rented_round_trip(self):
        item = make_item()
        item.mark_rented()
        assert item.status == ItemStatus.RENTED
        item.mark_returned()
        assert item.status == ItemStatus.AVAILABLE

    def test_catalog_cannot_touch_rented_item(self):
        item = make_item()
        item.mark_rented()
        with pytest.raises(ValidationError, match="rented out"):
            item.set_catalog_status(ItemStatus.MAINTENANCE)

    def test_catalog_cannot_set_rented(self):
        with pytest.raises(ValidationError, match="rental lifecycle"):
            make_item().set_catalog_status(ItemStatus.RENTED)
