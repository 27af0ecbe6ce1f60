"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Settings come from the environment; a ``.env`` file in the working
directory is loaded first and never overrides variables already set.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from rentals.application.config import RentalConfig
from rentals.domain.exceptions import ValidationError
from rentals.infrastructure.notification.logging_publisher import LoggingEventPublisher
from rentals.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork

load_dotenv()

# Default data directory: <repo root>/data when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    raw = os.getenv("RENTALS_DATA_DIR")
    return Path(raw).expanduser() if raw else _DEFAULT_DATA_DIR


def log_level() -> str:
    return os.getenv("RENTALS_LOG_LEVEL", "WARNING").upper()


def rental_config() -> RentalConfig:
    defaults = RentalConfig()
    return RentalConfig(
        admin_roles=_roles("RENTALS_ADMIN_ROLES", defaults.admin_roles),
        auditor_roles=_roles("RENTALS_AUDITOR_ROLES", defaults.auditor_roles),
        finance_roles=_roles("RENTALS_FINANCE_ROLES", defaults.finance_roles),
        max_order_items=_positive_int("RENTALS_MAX_ORDER_ITEMS", defaults.max_order_items),
    )


def unit_of_work() -> JsonUnitOfWork:
    return JsonUnitOfWork(data_dir())


def event_publisher() -> LoggingEventPublisher:
    return LoggingEventPublisher()


# --- Environment parsing ------------------------------------------------------


def _roles(name: str, default: frozenset[str]) -> frozenset[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return frozenset(r.strip().upper() for r in raw.split(",") if r.strip())


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValidationError(f"{name} must be at least 1")
    return value
