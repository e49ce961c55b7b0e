"""SQLAlchemy ORM models for the honeypot shop.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from honeypot.models.base import Base
from honeypot.models.cart import Cart
from honeypot.models.enums import UserRole
from honeypot.models.order import Order
from honeypot.models.product import Product
from honeypot.models.user import User

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    "Product",
    "Cart",
    "Order",
    # Enums
    "UserRole",
]
