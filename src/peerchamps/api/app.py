"""
peerchamps.api.app

FastAPI app factory for the PeerChamps access service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from peerchamps import __version__
from peerchamps.api.routers.companies import router as companies_router
from peerchamps.api.routers.dev_auth import router as dev_auth_router
from peerchamps.api.routers.health import router as health_router
from peerchamps.api.routers.session import router as session_router
from peerchamps.api.routers.users import router as users_router
from peerchamps.db.init_db import init_db
from peerchamps.db.session import create_engine, create_sessionmaker
from peerchamps.observability.logging import configure_logging, get_logger
from peerchamps.observability.middleware import RequestContextMiddleware
from peerchamps.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        env=settings.env,
        level=settings.log_level,
        fmt=settings.log_format,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.auto_create_tables:
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        lifespan=lifespan,
        title="PeerChamps Access",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(session_router)
    app.include_router(companies_router)
    app.include_router(users_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Prod deployments create the `companies`/`users` schema out of band; only dev/test
# bootstrap tables on startup.
