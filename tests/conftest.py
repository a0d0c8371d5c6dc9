"""
tests.conftest

Shared fixtures for API tests.

Responsibilities:
- Build the app against a throwaway SQLite file and run its lifespan.
- Seed two tenants with users of every role.
- Mint bearer tokens for seeded users.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from peerchamps.api.app import create_app
from peerchamps.auth.jwt import JwtConfig, issue_token
from peerchamps.auth.models import Role
from peerchamps.db.models import SubscriptionTier
from peerchamps.db.repositories.companies import CompanyRepo
from peerchamps.db.repositories.users import UserRepo
from peerchamps.settings import Settings


@dataclass(frozen=True)
class Seed:
    acme_id: uuid.UUID
    globex_id: uuid.UUID
    admin_id: uuid.UUID
    rep_id: uuid.UUID
    advocate_id: uuid.UUID
    globex_rep_id: uuid.UUID
    inactive_id: uuid.UUID


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'peerchamps.db'}",
        jwt_secret="test-secret",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx's ASGITransport does not run lifespan events; drive them explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def seed(app: FastAPI) -> Seed:
    async with app.state.sessionmaker() as session:
        companies = CompanyRepo(session)
        users = UserRepo(session)

        acme = await companies.create(name="Acme", domain="acme.test")
        globex = await companies.create(
            name="Globex", domain="globex.test", subscription_tier=SubscriptionTier.enterprise
        )
        admin = await users.create(company_id=acme.id, email="admin@acme.test", role=Role.admin)
        rep = await users.create(company_id=acme.id, email="rep@acme.test", role=Role.sales_rep)
        advocate = await users.create(
            company_id=acme.id, email="advocate@acme.test", role=Role.advocate
        )
        globex_rep = await users.create(
            company_id=globex.id, email="rep@globex.test", role=Role.sales_rep
        )
        inactive = await users.create(
            company_id=acme.id, email="gone@acme.test", role=Role.sales_rep
        )
        inactive.is_active = False
        await session.commit()

        return Seed(
            acme_id=acme.id,
            globex_id=globex.id,
            admin_id=admin.id,
            rep_id=rep.id,
            advocate_id=advocate.id,
            globex_rep_id=globex_rep.id,
            inactive_id=inactive.id,
        )


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[..., dict[str, str]]:
    cfg = JwtConfig.from_settings(settings)

    def _headers(user_id: uuid.UUID | str, **extra: str) -> dict[str, str]:
        token = issue_token(cfg=cfg, subject=str(user_id), email=f"{user_id}@example.test")
        return {"Authorization": f"Bearer {token}", **extra}

    return _headers
