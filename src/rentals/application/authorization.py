"""Explicit authorization checks run at the top of every handler."""

from __future__ import annotations

from typing import Iterable

from rentals.domain.exceptions import UnauthorizedError
from rentals.domain.model.auth import AuthContext


def require_roles(auth: AuthContext, roles: Iterable[str], action: str) -> None:
    roles = frozenset(roles)
    if not auth.has_any_role(roles):
        raise UnauthorizedError(
            f"User '{auth.user_id}' may not {action} (needs one of: {', '.join(sorted(roles))})"
        )


def require_owner_or_roles(
    auth: AuthContext, owner_id: str, roles: Iterable[str], action: str
) -> None:
    if auth.user_id == owner_id:
        return
    require_roles(auth, roles, action)
