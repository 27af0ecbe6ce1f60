"""Abstract repository for Payment entities."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.payment import Payment


class PaymentRepository(ABC):

    @abstractmethod
    def get_by_id(self, payment_id: int) -> Payment | None:
        """Return a payment by its ID, or None if not found."""

    @abstractmethod
    def get_by_payment_no(self, payment_no: str) -> Payment | None:
        """Return a payment by its public number, or None if not found."""

    @abstractmethod
    def get_by_transaction_id(self, transaction_id: str) -> Payment | None:
        """Return the payment a gateway transaction was recorded on, or None."""

    @abstractmethod
    def list_by_order_id(self, order_id: int) -> list[Payment]:
        """Return every payment linked to an order, refunds included."""

    @abstractmethod
    def save(self, payment: Payment) -> None:
        """Persist a new or updated payment."""

    def exists_by_payment_no(self, payment_no: str) -> bool:
        return self.get_by_payment_no(payment_no) is not None
