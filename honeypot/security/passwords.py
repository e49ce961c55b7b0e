"""Password hashing through passlib's pbkdf2_sha256.

Stored format is passlib's modular crypt string:
`$pbkdf2-sha256$<rounds>$<salt>$<checksum>`.

Usage:
    from honeypot.security.passwords import hash_password, verify_password

    stored = hash_password("hunter22")
    verify_password("hunter22", stored)  # True
"""

from __future__ import annotations

import logging

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from honeypot.config import settings

logger = logging.getLogger(__name__)


def make_context(rounds: int) -> CryptContext:
    """pbkdf2_sha256 context hashing new passwords with `rounds` iterations."""
    return CryptContext(
        schemes=["pbkdf2_sha256"],
        deprecated="auto",
        pbkdf2_sha256__default_rounds=rounds,
    )


# Module-level singleton, import this wherever passwords are hashed or checked.
pwd_context = make_context(settings.security.password_iterations)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored: str, context: CryptContext | None = None) -> bool:
    """Unknown or malformed stored hashes never verify."""
    try:
        return bool((context or pwd_context).verify(password, stored))
    except UnknownHashError:
        logger.warning("Password hash in an unrecognised format")
        return False
    except (ValueError, TypeError):
        logger.warning("Unreadable password hash encountered")
        return False
