"""Bearer tokens — HS256 JWTs carrying the user id.

Usage:
    from honeypot.security.tokens import token_service

    token = token_service.issue(user.id)
    user_id = token_service.decode(token)  # raises jwt.PyJWTError subclasses
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta

import jwt

from honeypot.config import settings

logger = logging.getLogger(__name__)


class TokenService:
    """Issue and verify signed user tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_days: int = 30) -> None:
        if not secret:
            msg = "A signing secret is required"
            raise ValueError(msg)
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = timedelta(days=expire_days)

    def issue(self, user_id: int) -> str:
        now = datetime.now(UTC)
        payload = {"id": user_id, "iat": now, "exp": now + self._lifetime}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> int:
        """Return the user id in `token`.

        Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
        """
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        user_id = payload.get("id")
        if not isinstance(user_id, int):
            msg = "Token carries no user id"
            raise jwt.InvalidTokenError(msg)
        return user_id


def _load_secret() -> str:
    """Load the signing secret from settings."""
    secret = settings.security.jwt_secret
    if not secret:
        logger.warning("JWT_SECRET not set — using a random ephemeral secret (tokens won't survive restarts)")
        return secrets.token_urlsafe(48)
    return secret


# Module-level singleton
token_service = TokenService(
    _load_secret(),
    algorithm=settings.security.jwt_algorithm,
    expire_days=settings.security.jwt_expire_days,
)
