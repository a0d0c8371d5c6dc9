"""
peerchamps.db.models

Tenant/role store schema.

Responsibilities:
- Company: the tenant (isolation boundary) with its subscription tier.
- User: application user belonging to exactly one company, carrying its role.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Index, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from peerchamps.auth.models import Role
from peerchamps.db.base import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class SubscriptionTier(enum.StrEnum):
    starter = "starter"
    professional = "professional"
    enterprise = "enterprise"


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # Email domain used for tenant identification at sign-up.
    domain: Mapped[str | None] = mapped_column(String(256), nullable=True, unique=True, index=True)
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        Enum(SubscriptionTier, native_enum=False),
        nullable=False,
        default=SubscriptionTier.professional,
    )
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    users: Mapped[list[User]] = relationship(back_populates="company", cascade="all, delete-orphan")


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    # Stored as plain text so an out-of-band value surfaces as "unknown role" (denied)
    # instead of failing the row load.
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    profile: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    company: Mapped[Company] = relationship(back_populates="users")

    __table_args__ = (Index("ix_users_company_role", "company_id", "role"),)

    @property
    def parsed_role(self) -> Role | None:
        return Role.coerce(self.role)


# --- Module Notes -----------------------------------------------------------
# Every tenant-scoped table added later (advocates, opportunities, reference calls)
# should carry a `company_id` so `rbac.tenancy.can_access_record` applies.
