"""Application service: advisory availability query.

Meant for the catalog UI before a renter submits.  The answer is only a
hint: creation and approval repeat the check inside their transaction.
"""

from __future__ import annotations

from datetime import date

from rentals.domain.model.value_objects import DateRange
from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.availability import AvailabilityChecker


class CheckAvailabilityHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, item_id: str, start_date: date, end_date: date) -> bool:
        DateRange(start_date, end_date)
        item = self._uow.items.get_by_id(item_id)
        if item is None or not item.is_rentable:
            return False
        checker = AvailabilityChecker(self._uow.orders)
        return not checker.has_conflict(item_id, start_date, end_date)
