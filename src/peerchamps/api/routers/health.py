"""
peerchamps.api.routers.health

Liveness (`/healthz`) and readiness (`/readyz`, DB round-trip) probes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from peerchamps.api.deps import db_session

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    # The tenant/role store is the only hard dependency.
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
