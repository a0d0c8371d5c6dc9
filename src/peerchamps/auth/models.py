"""
peerchamps.auth.models

Auth domain models.

Responsibilities:
- Define the closed role enumeration.
- Define the identity supplied by the identity provider and the resolved `Principal`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(enum.StrEnum):
    # Stored verbatim in `users.role`; not extensible at runtime.
    admin = "admin"
    sales_rep = "sales_rep"
    advocate = "advocate"

    @classmethod
    def coerce(cls, value: object) -> Role | None:
        """
        Map a raw role value onto the enumeration.

        Unknown strings (and anything that is not a string) yield `None` so callers
        fall through to deny-by-default instead of guessing.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Identity:
    """
    What the identity provider vouches for: a stable id and an email.
    """

    id: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller with its role and owning tenant, as looked up in the store.
    """

    id: str
    email: str | None
    role: Role | None
    tenant_id: str | None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


# --- Module Notes -----------------------------------------------------------
# `Principal` is immutable; a role change observed on refresh produces a new value
# via `dataclasses.replace`.
