"""Caller identity as handed over by the authentication layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @staticmethod
    def of(user_id: str, *roles: str) -> AuthContext:
        return AuthContext(user_id=user_id, roles=frozenset(r.upper() for r in roles))

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return not self.roles.isdisjoint(roles)
