"""Account endpoints — registration, login, profile.

Authentication attempts are the most interesting traffic a honeypot
sees, so every outcome (including duplicate sign-ups) is recorded as an
AUTH_ATTEMPT with the email that was tried.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from honeypot.activity.logger import ActivityLogger
from honeypot.api.deps import get_activity_logger, protect, request_context
from honeypot.api.errors import reporting_errors
from honeypot.config import settings
from honeypot.db.engine import get_session
from honeypot.models.user import User
from honeypot.schemas.activity import RequestContext
from honeypot.schemas.shop import AuthOut, LoginRequest, ProfileUpdate, RegisterRequest, UserOut
from honeypot.security.passwords import hash_password, verify_password
from honeypot.security.tokens import token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        address={
            "street": user.street,
            "city": user.city,
            "state": user.state,
            "zip_code": user.zip_code,
            "country": user.country,
        },
        phone=user.phone,
    )


def _auth_out(user: User) -> AuthOut:
    return AuthOut(**_user_out(user).model_dump(), token=token_service.issue(user.id))


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> AuthOut:
    """Create an account and return it with a bearer token."""
    with reporting_errors(activity, "REGISTER_ERROR", ctx, email=body.email):
        missing = [
            name for name in ("username", "email", "password", "first_name", "last_name")
            if not getattr(body, name)
        ]
        if missing:
            activity.suspicious_activity("REGISTER_MISSING_FIELDS", {"email": body.email, "missing": missing}, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please fill in all fields")

        if len(body.password) < settings.security.password_min_length:
            activity.suspicious_activity("REGISTER_WEAK_PASSWORD", {"email": body.email}, ctx)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {settings.security.password_min_length} characters",
            )

        result = await db.execute(
            select(User).where(or_(User.email == body.email, User.username == body.username))
        )
        if result.scalars().first() is not None:
            activity.auth_attempt(body.email, False, None, ctx)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

        user = User(
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        activity.auth_attempt(body.email, True, user.id, ctx)
        logger.info("Registered user %s", user.id)
        return _auth_out(user)


@router.post("/login")
async def login_user(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> AuthOut:
    """Exchange email + password for a bearer token."""
    with reporting_errors(activity, "LOGIN_ERROR", ctx, email=body.email):
        if not body.email or not body.password:
            activity.suspicious_activity("LOGIN_MISSING_FIELDS", {"email": body.email}, ctx)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please provide email and password",
            )

        result = await db.execute(select(User).where(User.email == body.email))
        user = result.scalars().first()

        if user is None or not verify_password(body.password, user.password_hash):
            activity.auth_attempt(body.email, False, user.id if user else None, ctx)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

        activity.auth_attempt(body.email, True, user.id, ctx)
        return _auth_out(user)


@router.get("/profile")
async def get_user_profile(
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> UserOut:
    with reporting_errors(activity, "GET_PROFILE_ERROR", ctx, userId=user.id):
        current = await db.get(User, user.id)
        if current is None:
            activity.suspicious_activity("GET_PROFILE_NOT_FOUND", {"userId": user.id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        activity.api_access("/api/users/profile", "GET", current.id, None, ctx)
        return _user_out(current)


@router.put("/profile")
async def update_user_profile(
    body: ProfileUpdate,
    user: User = Depends(protect),
    db: AsyncSession = Depends(get_session),
    activity: ActivityLogger = Depends(get_activity_logger),
    ctx: RequestContext = Depends(request_context),
) -> AuthOut:
    """Update whichever profile fields were sent; returns a fresh token."""
    with reporting_errors(activity, "UPDATE_PROFILE_ERROR", ctx, userId=user.id):
        current = await db.get(User, user.id)
        if current is None:
            activity.suspicious_activity("UPDATE_PROFILE_NOT_FOUND", {"userId": user.id}, ctx)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        current.first_name = body.first_name or current.first_name
        current.last_name = body.last_name or current.last_name
        current.email = body.email or current.email
        current.username = body.username or current.username
        current.phone = body.phone or current.phone
        if body.address is not None:
            current.street = body.address.street or current.street
            current.city = body.address.city or current.city
            current.state = body.address.state or current.state
            current.zip_code = body.address.zip_code or current.zip_code
            current.country = body.address.country or current.country
        if body.password:
            current.password_hash = hash_password(body.password)

        await db.commit()
        await db.refresh(current)

        activity.api_access("/api/users/profile", "PUT", current.id, None, ctx)
        return _auth_out(current)
