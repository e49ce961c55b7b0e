"""Shared fixtures — a tmp-dir ActivityLogger, an in-memory database, and an
HTTP client bound to a fresh app instance."""

from __future__ import annotations

import os

# Cheap hashing and a fixed signing key for the whole test run; must be set
# before honeypot.config is first imported.
os.environ.setdefault("PASSWORD_ITERATIONS", "1000")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-honeypot-suite-0123456789")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from honeypot.activity.logger import ActivityLogger  # noqa: E402
from honeypot.db.engine import get_session  # noqa: E402
from honeypot.models import Base, Product, User  # noqa: E402
from honeypot.security.passwords import hash_password  # noqa: E402


@pytest.fixture
def activity(tmp_path) -> ActivityLogger:
    """ActivityLogger writing into tmp_path/logs, console echo off."""
    logger = ActivityLogger(tmp_path / "logs", console_echo=False)
    yield logger
    logger.close()


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(activity, session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client against a fresh app using the tmp logger and in-memory DB."""
    from honeypot.main import create_app

    app = create_app(activity_logger=activity)

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _session
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


@pytest.fixture
def make_user(session_factory) -> Callable[..., Awaitable[User]]:
    """Insert a user. Usage: `user = await make_user(email=..., role="admin")`."""

    async def _make(
        *,
        id: int | None = None,  # noqa: A002
        username: str = "shopper",
        email: str = "user@example.com",
        password: str = "secret123",
        role: str = "user",
    ) -> User:
        async with session_factory() as db:
            user = User(
                id=id,
                username=username,
                email=email,
                password_hash=hash_password(password),
                first_name="Test",
                last_name="User",
                role=role,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user

    return _make


@pytest.fixture
def make_product(session_factory) -> Callable[..., Awaitable[Product]]:
    """Insert a product. Usage: `product = await make_product(stock=3)`."""

    async def _make(
        *,
        id: int | None = None,  # noqa: A002
        name: str = "Widget",
        price: str = "19.99",
        stock: int = 10,
    ) -> Product:
        async with session_factory() as db:
            product = Product(
                id=id,
                name=name,
                description=f"{name} description",
                price=Decimal(price),
                category="Gadgets",
                brand="Acme",
                stock=stock,
                images=[f"/images/{name.lower()}.jpg"],
                specifications={},
            )
            db.add(product)
            await db.commit()
            await db.refresh(product)
            return product

    return _make
