"""Application service: finance ledger summary.

Totals are summed as Decimals straight from the ledger; ``net`` is
income minus expenses minus refunds and may be negative, so it is
reported as a plain string rather than Money.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from rentals.application.authorization import require_roles
from rentals.application.config import RentalConfig
from rentals.application.dto import FinanceSummaryDTO, record_to_dto
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.finance import FinanceType
from rentals.domain.model.value_objects import CENT
from rentals.domain.repository.unit_of_work import UnitOfWork


class FinanceSummaryHandler:

    def __init__(self, uow: UnitOfWork, config: RentalConfig) -> None:
        self._uow = uow
        self._config = config

    def handle(self, auth: AuthContext, order_id: int | None = None) -> FinanceSummaryDTO:
        require_roles(auth, self._config.finance_roles, "view the finance ledger")

        records = (
            self._uow.finance_records.list_by_order_id(order_id)
            if order_id is not None
            else self._uow.finance_records.list_all()
        )

        totals: dict[FinanceType, Decimal] = {t: Decimal("0") for t in FinanceType}
        by_category: dict[str, Decimal] = defaultdict(Decimal)
        for record in records:
            totals[record.type] += record.amount.amount
            by_category[f"{record.type.value}/{record.category}"] += record.amount.amount

        net = (
            totals[FinanceType.INCOME]
            - totals[FinanceType.EXPENSE]
            - totals[FinanceType.REFUND]
        )
        return FinanceSummaryDTO(
            total_income=_fmt(totals[FinanceType.INCOME]),
            total_expense=_fmt(totals[FinanceType.EXPENSE]),
            total_refund=_fmt(totals[FinanceType.REFUND]),
            net=_fmt(net),
            by_category={k: _fmt(v) for k, v in sorted(by_category.items())},
            records=[record_to_dto(r) for r in records],
        )


def _fmt(value: Decimal) -> str:
    return f"{value.quantize(CENT):.2f}"
