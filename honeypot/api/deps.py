"""FastAPI dependencies — activity logger injection and the auth gates.

The gates are event sources like any handler: every way a request can be
turned away is written to the activity trail before the 401/403 goes out.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging

import jwt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from honeypot.activity.context import context_from_request
from honeypot.activity.logger import ActivityLogger
from honeypot.db.engine import get_session
from honeypot.models.user import User
from honeypot.schemas.activity import RequestContext
from honeypot.security.tokens import token_service

logger = logging.getLogger(__name__)

_BEARER = "Bearer "


def get_activity_logger(request: Request) -> ActivityLogger:
    """The process-wide ActivityLogger created by `create_app()`."""
    return request.app.state.activity_logger


def request_context(request: Request) -> RequestContext:
    return context_from_request(request)


def _token_prefix(token: str | None) -> str:
    return f"{token[:10]}..." if token else "none"


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


async def protect(
    request: Request,
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> User:
    """Require a valid bearer token. Returns the authenticated user."""
    header = request.headers.get("authorization", "")
    if not header.startswith(_BEARER):
        activity.suspicious_activity("AUTH_NO_TOKEN", {"ip": ctx.ip, "url": ctx.url}, ctx)
        raise _unauthorized("Not authorized, no token")

    token = header[len(_BEARER):].strip()
    if not token:
        activity.suspicious_activity("AUTH_MISSING_TOKEN", {"ip": ctx.ip, "url": ctx.url}, ctx)
        raise _unauthorized("Not authorized, no token provided")

    try:
        user_id = token_service.decode(token)
    except jwt.ExpiredSignatureError as exc:
        activity.suspicious_activity(
            "AUTH_TOKEN_ERROR", {"error": type(exc).__name__, "token": _token_prefix(token)}, ctx
        )
        raise _unauthorized("Not authorized, token expired") from exc
    except jwt.InvalidTokenError as exc:
        activity.suspicious_activity(
            "AUTH_TOKEN_ERROR", {"error": type(exc).__name__, "token": _token_prefix(token)}, ctx
        )
        raise _unauthorized("Not authorized, token invalid") from exc

    user = await db.get(User, user_id)
    if user is None:
        activity.suspicious_activity("AUTH_USER_NOT_FOUND", {"token": _token_prefix(token)}, ctx)
        raise _unauthorized("Not authorized, user not found")

    activity.api_access(ctx.url or request.url.path, request.method, user.id, None, ctx)
    return user


async def optional_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> User | None:
    """Identify the caller when a bearer token is sent; guests pass through."""
    header = request.headers.get("authorization", "")
    if not header.startswith(_BEARER):
        return None

    token = header[len(_BEARER):].strip()
    try:
        user_id = token_service.decode(token)
    except jwt.InvalidTokenError as exc:
        activity.suspicious_activity(
            "AUTH_OPTIONAL_TOKEN_INVALID", {"error": type(exc).__name__, "token": _token_prefix(token)}, ctx
        )
        return None

    user = await db.get(User, user_id)
    if user is None:
        activity.suspicious_activity("AUTH_OPTIONAL_TOKEN_INVALID", {"error": "UserNotFound", "token": _token_prefix(token)}, ctx)
    return user


async def require_admin(
    user: User = Depends(protect),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> User:
    """Require an authenticated administrator."""
    if not user.is_admin:
        activity.suspicious_activity("ADMIN_ACCESS_DENIED", {"userId": user.id, "url": ctx.url}, ctx)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized as an admin")
    return user
