"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rentals.domain.exceptions import InvalidRangeError, ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount in the marketplace's single currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        return self.amount >= other.amount

    def quantized(self) -> Money:
        """Round to cents, half away from zero."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def parse(raw: str | int | Decimal) -> Money:
        """Parse an amount entered by a user or a client: whole cents only."""
        money = Money.of(raw)
        try:
            whole_cents = money.amount == money.amount.quantize(CENT)
        except InvalidOperation as exc:
            raise ValidationError(f"Money amount {raw!r} is out of range") from exc
        if not whole_cents:
            raise ValidationError(
                f"Money amount {raw!r} has more than two decimal places"
            )
        return money

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))

    @staticmethod
    def total(amounts: list[Money]) -> Money:
        result = Money.zero()
        for amount in amounts:
            result = result + amount
        return result


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot rent zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DateRange:
    """Inclusive rental period ``[start, end]``.

    A range where ``start == end`` is well-formed but has zero billable
    days; pricing rejects it separately.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise InvalidRangeError("Rental dates must be calendar dates")
        if self.start > self.end:
            raise InvalidRangeError(
                f"End date {self.end.isoformat()} is before start date "
                f"{self.start.isoformat()}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def overlaps(self, other: DateRange) -> bool:
        """Closed-interval overlap: touching end and start dates collide."""
        return self.start <= other.end and self.end >= other.start

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
