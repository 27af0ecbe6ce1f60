"""Domain service: Pricing Calculator.

Pure functions: the same lines and dates always give the same quote, so
a retried request prices an order exactly as the first attempt did.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from rentals.domain.exceptions import InvalidRangeError
from rentals.domain.model.value_objects import DateRange, Money, Quantity


@dataclass(frozen=True)
class PricedLine:
    price_per_day: Money
    quantity: Quantity


@dataclass(frozen=True)
class PriceQuote:
    days: int
    line_totals: list[Money]
    order_total: Money


def rental_days(start_date: date, end_date: date) -> int:
    """Billable days between the two dates; at least one."""
    days = DateRange(start_date, end_date).days
    if days < 1:
        raise InvalidRangeError(
            f"Rental must last at least one day "
            f"({start_date.isoformat()} -> {end_date.isoformat()})"
        )
    return days


def compute_total(lines: list[PricedLine], start_date: date, end_date: date) -> PriceQuote:
    """Price every line as ``price_per_day x quantity x days``.

    Each line total is rounded to cents (half-up) before summing, so the
    order total is always the exact sum of what the lines display.
    """
    days = rental_days(start_date, end_date)
    line_totals = [
        (line.price_per_day * line.quantity.value * days).quantized()
        for line in lines
    ]
    return PriceQuote(days=days, line_totals=line_totals, order_total=Money.total(line_totals))


def compute_deposit(lines: list[tuple[Money, Quantity]]) -> Money:
    """Sum of per-unit deposits times quantity; independent of duration."""
    return Money.total([(deposit * qty.value).quantized() for deposit, qty in lines])
