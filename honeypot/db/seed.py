"""Load demo users and products into a fresh database.

Drops and recreates every table first.

Usage:
    python -m honeypot.db.seed
"""

from __future__ import annotations

import asyncio
import logging
import sys
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from honeypot.models import Base, Product, User, UserRole
from honeypot.security.passwords import hash_password

logger = logging.getLogger(__name__)

SAMPLE_USERS: list[dict[str, Any]] = [
    {
        "username": "admin",
        "email": "admin@example.com",
        "password": "admin123",
        "first_name": "Admin",
        "last_name": "User",
        "role": UserRole.ADMIN.value,
        "street": "123 Admin St",
        "city": "Adminville",
        "state": "CA",
        "zip_code": "90210",
        "country": "USA",
        "phone": "555-1234",
    },
    {
        "username": "john_doe",
        "email": "john@example.com",
        "password": "password123",
        "first_name": "John",
        "last_name": "Doe",
        "role": UserRole.USER.value,
        "street": "456 Main St",
        "city": "Anytown",
        "state": "NY",
        "zip_code": "10001",
        "country": "USA",
        "phone": "555-5678",
    },
    {
        "username": "jane_smith",
        "email": "jane@example.com",
        "password": "securepassword",
        "first_name": "Jane",
        "last_name": "Smith",
        "role": UserRole.USER.value,
        "street": "789 Oak Ave",
        "city": "Somewhere",
        "state": "TX",
        "zip_code": "75001",
        "country": "USA",
        "phone": "555-9012",
    },
]

SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Smartphone X Pro",
        "description": "Latest smartphone with advanced features and high-resolution camera",
        "price": Decimal("899.99"),
        "category": "Electronics",
        "brand": "TechBrand",
        "stock": 25,
        "images": ["https://via.placeholder.com/300x300?text=Smartphone"],
        "specifications": {"Screen Size": "6.7 inches", "Storage": "128GB", "Camera": "48MP", "Battery": "5000mAh"},
        "rating_average": Decimal("4.5"),
        "rating_count": 128,
        "is_featured": True,
    },
    {
        "name": "Wireless Headphones",
        "description": "Premium wireless headphones with noise cancellation",
        "price": Decimal("199.99"),
        "category": "Electronics",
        "brand": "SoundMax",
        "stock": 50,
        "images": ["https://via.placeholder.com/300x300?text=Headphones"],
        "specifications": {"Battery Life": "30 hours", "Connectivity": "Bluetooth 5.0", "Weight": "250g", "Color": "Black"},
        "rating_average": Decimal("4.2"),
        "rating_count": 89,
        "is_featured": True,
    },
    {
        "name": "Laptop Ultra Slim",
        "description": "Ultra-slim laptop with powerful performance",
        "price": Decimal("1299.99"),
        "category": "Computers",
        "brand": "TechBrand",
        "stock": 15,
        "images": ["https://via.placeholder.com/300x300?text=Laptop"],
        "specifications": {"Processor": "Intel i7", "RAM": "16GB", "Storage": "512GB SSD", "Screen": "14 inch"},
        "rating_average": Decimal("4.7"),
        "rating_count": 67,
        "is_featured": True,
    },
    {
        "name": "Smart Watch Series 5",
        "description": "Advanced smartwatch with health monitoring",
        "price": Decimal("299.99"),
        "category": "Wearables",
        "brand": "WatchCorp",
        "stock": 30,
        "images": ["https://via.placeholder.com/300x300?text=Smartwatch"],
        "specifications": {"Display": "AMOLED", "Water Resistance": "50m", "Battery": "18 hours", "Health Features": "Heart Rate, GPS"},
        "rating_average": Decimal("4.0"),
        "rating_count": 156,
        "is_featured": False,
    },
    {
        "name": "Gaming Console",
        "description": "Next-generation gaming console with 4K support",
        "price": Decimal("499.99"),
        "category": "Gaming",
        "brand": "GameTech",
        "stock": 10,
        "images": ["https://via.placeholder.com/300x300?text=Gaming+Console"],
        "specifications": {"Storage": "1TB SSD", "Resolution": "4K", "Frame Rate": "120fps", "Controllers": "2 included"},
        "rating_average": Decimal("4.8"),
        "rating_count": 203,
        "is_featured": True,
    },
    {
        "name": "Bluetooth Speaker",
        "description": "Portable Bluetooth speaker with 360-degree sound",
        "price": Decimal("89.99"),
        "category": "Audio",
        "brand": "SoundMax",
        "stock": 40,
        "images": ["https://via.placeholder.com/300x300?text=Speaker"],
        "specifications": {"Power": "20W", "Battery": "12 hours", "Waterproof": "IPX7", "Connectivity": "Bluetooth 5.2"},
        "rating_average": Decimal("4.1"),
        "rating_count": 74,
        "is_featured": False,
    },
]


async def seed_database(target: AsyncEngine) -> tuple[int, int]:
    """Recreate the schema on `target` and insert the samples.

    Returns (users created, products created).
    """
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema recreated")

    session_factory = async_sessionmaker(target, expire_on_commit=False)
    async with session_factory() as db:
        for sample in SAMPLE_USERS:
            fields = dict(sample)
            password = fields.pop("password")
            db.add(User(**fields, password_hash=hash_password(password)))
            logger.info("Created user: %s", sample["username"])

        for sample in SAMPLE_PRODUCTS:
            db.add(Product(**sample))
            logger.info("Created product: %s", sample["name"])

        await db.commit()

    return len(SAMPLE_USERS), len(SAMPLE_PRODUCTS)


async def _main() -> None:
    from honeypot.db.engine import close_db, engine, ensure_database_directory

    ensure_database_directory()
    try:
        users, products = await seed_database(engine)
        logger.info("Sample data created: %d users and %d products", users, products)
    finally:
        await close_db()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-8s %(name)s — %(message)s")
    try:
        asyncio.run(_main())
    except Exception:
        logger.exception("Error seeding database")
        sys.exit(1)
