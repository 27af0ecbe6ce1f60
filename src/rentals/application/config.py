"""Runtime configuration handed to every application handler.

Nothing here is process-global: the composition root (or a test) builds
one ``RentalConfig`` and passes it into the handlers it creates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.domain.service.order_state_machine import OrderStateMachine
from rentals.domain.service.payment_reconciler import PaymentReconciler


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RentalConfig:
    admin_roles: frozenset[str] = frozenset({"ADMIN"})
    auditor_roles: frozenset[str] = frozenset({"ADMIN", "ORDER_AUDIT"})
    finance_roles: frozenset[str] = frozenset({"ADMIN", "PAYMENT_REFUND"})
    max_order_items: int = 50
    order_no_prefix: str = "ORD"
    payment_no_prefix: str = "PAY"
    record_no_prefix: str = "FIN"
    clock: Callable[[], datetime] = _utcnow

    @property
    def staff_roles(self) -> frozenset[str]:
        """Everyone allowed to look at other people's orders."""
        return self.admin_roles | self.auditor_roles | self.finance_roles

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()

    # --- Domain service factories ---------------------------------------------

    def reconciler(self, uow: UnitOfWork) -> PaymentReconciler:
        return PaymentReconciler(
            uow,
            payment_prefix=self.payment_no_prefix,
            record_prefix=self.record_no_prefix,
            clock=self.clock,
        )

    def state_machine(self, uow: UnitOfWork) -> OrderStateMachine:
        return OrderStateMachine(uow, self.reconciler(uow), clock=self.clock)
