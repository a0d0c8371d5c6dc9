"""
peerchamps.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide settings and request-scoped DB sessions.
- Encapsulate app.state access patterns (engine/sessionmaker/settings).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from peerchamps.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are the ones `create_app` was built with, not a fresh env read.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
