"""
peerchamps.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the API, auth, persistence and logging layers.
- Keep the JWT secret out of repr/logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All values can be overridden with `PEERCHAMPS_*` environment variables,
    e.g. `PEERCHAMPS_DATABASE_URL` or `PEERCHAMPS_JWT_SECRET`.
    """

    model_config = SettingsConfigDict(env_prefix="PEERCHAMPS_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "peerchamps-access"
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity provider (bearer JWTs)
    jwt_alg: str = "HS256"
    jwt_issuer: str = "peerchamps"
    jwt_audience: str = "peerchamps-app"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Tenant/role store
    database_url: str = "sqlite+aiosqlite:///./peerchamps.db"

    @property
    def auto_create_tables(self) -> bool:
        return self.env in ("dev", "test")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly and pass it to `create_app`; the cached
# instance is only used by the default dependency wiring.
