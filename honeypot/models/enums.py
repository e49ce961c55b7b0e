"""Domain enums used across SQLAlchemy models and Pydantic schemas."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account role — admins may manage products and fulfil orders."""

    USER = "user"
    ADMIN = "admin"
