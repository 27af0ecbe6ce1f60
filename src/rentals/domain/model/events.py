"""Outbound domain events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from rentals.domain.model.order import OrderStatus


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: int
    order_no: str
    old_status: OrderStatus
    new_status: OrderStatus
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
