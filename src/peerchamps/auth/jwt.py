"""
peerchamps.auth.jwt

JWT issuing and validation helpers, plus the bearer-token identity provider.

Responsibilities:
- Issue short-lived JWTs for local/dev sign-in.
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).
- Turn a bearer token into an `Identity` for the session context.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from peerchamps.auth.models import Identity
from peerchamps.session.errors import IdentityExpired
from peerchamps.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


class JwtExpiredError(JwtValidationError, IdentityExpired):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    email: str | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    # Roles are deliberately not embedded: they live in the users table and are
    # re-fetched by the session context.
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except ExpiredSignatureError as e:
        raise JwtExpiredError(str(e)) from e
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


class BearerIdentityProvider:
    """
    Identity provider backed by a single bearer token.

    A missing token means "no session" (returns None); a malformed or expired token
    raises `JwtValidationError`; the session context turns either into ANONYMOUS
    (expired tokens are reported as an expiry rather than a failure).
    """

    def __init__(self, *, cfg: JwtConfig, token: str | None) -> None:
        self._cfg = cfg
        self._token = token

    async def current_identity(self) -> Identity | None:
        if not self._token:
            return None
        payload = decode_and_validate(cfg=self._cfg, token=self._token)
        subject = str(payload.get("sub") or "")
        if not subject:
            raise JwtValidationError("empty subject")
        email = payload.get("email")
        return Identity(id=subject, email=str(email) if email else None)


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/dev_auth.py` and by the API tests.
