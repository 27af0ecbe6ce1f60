"""Finance ledger entries.

A FinanceRecord is written once and never changed; corrections are new
records (a refund after an income, an expense after a damaged return).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rentals.domain.model.value_objects import Money


class FinanceType(Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    REFUND = "REFUND"


CATEGORY_RENTAL = "RENTAL"
CATEGORY_DEPOSIT = "DEPOSIT"
CATEGORY_DAMAGE = "DAMAGE"


@dataclass(frozen=True)
class FinanceRecord:
    record_no: str
    type: FinanceType
    category: str
    amount: Money
    description: str
    order_id: int | None = None
    payment_id: int | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
