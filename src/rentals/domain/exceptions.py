"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each rejected operation maps to exactly one of the concrete kinds below.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Input violates a basic business rule (quantity, amount, empty order)."""


class InvalidRangeError(ValidationError):
    """A rental date range is malformed or shorter than one day."""


class NotFoundError(DomainException):
    """A requested order, payment or item does not exist."""


class UnauthorizedError(DomainException):
    """The caller lacks the role or ownership the operation requires."""


class ItemUnavailableError(DomainException):
    """An item cannot be booked for the requested range at creation time."""

    def __init__(self, item_id: str, message: str) -> None:
        super().__init__(message)
        self.item_id = item_id


class ConflictError(DomainException):
    """Another order claimed the item while this one was waiting for audit."""

    def __init__(self, item_id: str, order_id: int | None, message: str) -> None:
        super().__init__(message)
        self.item_id = item_id
        self.order_id = order_id


class IllegalStateError(DomainException):
    """A status transition was requested from a state that does not allow it."""

    def __init__(self, subject: str, current: str, requested: str) -> None:
        super().__init__(
            f"{subject} cannot move from {current} to {requested}"
        )
        self.subject = subject
        self.current = current
        self.requested = requested


class RefundExceedsPaidError(DomainException):
    """A refund asks for more than what is left of the settled payment."""

    def __init__(self, requested: object, refundable: object) -> None:
        super().__init__(
            f"Refund of {requested} exceeds refundable amount {refundable}"
        )
        self.requested = requested
        self.refundable = refundable
