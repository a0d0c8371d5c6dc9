"""
peerchamps.db.init_db

Dev/test schema bootstrap.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from peerchamps.db import models  # noqa: F401  # registers tables on Base.metadata
from peerchamps.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
