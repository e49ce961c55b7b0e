"""Security module — password hashing and bearer tokens."""

from honeypot.security.passwords import hash_password, verify_password
from honeypot.security.tokens import token_service

__all__ = ["hash_password", "token_service", "verify_password"]
