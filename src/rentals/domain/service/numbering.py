"""Externally visible document numbers (orders, payments, ledger records).

Numbers are opaque: a prefix, a timestamp and a random suffix.  The only
contract is uniqueness, which is checked against the owning repository.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Callable

MAX_ATTEMPTS = 20


def generate_number(
    prefix: str,
    exists: Callable[[str], bool],
    now: datetime | None = None,
) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S")
    for _ in range(MAX_ATTEMPTS):
        candidate = f"{prefix}{stamp}{secrets.token_hex(3).upper()}"
        if not exists(candidate):
            return candidate
    raise RuntimeError(f"Could not allocate a unique {prefix} number")
