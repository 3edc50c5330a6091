"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting and a configurable
work factor.  Passwords are SHA-256 pre-hashed (base64, 44 bytes) so input
of any length fits under bcrypt's 72-byte limit without truncation.
"""

from __future__ import annotations

import base64
import functools
import hashlib
from typing import Optional

import bcrypt

from auth.errors import HashingError
from config.settings import config


def _prehash(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8", "surrogatepass")).digest()
    return base64.b64encode(digest)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt (auto-salted, work factor from config)."""
    try:
        salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
        return bcrypt.hashpw(_prehash(password), salt).decode()
    except (ValueError, TypeError) as exc:
        raise HashingError(f"Password hashing failed: {exc}") from exc


def verify_password(password: str, password_hash: str) -> bool:
    """
    Constant-time comparison against a bcrypt hash.

    A wrong password returns ``False``; a stored hash that bcrypt cannot
    parse raises ``HashingError``.
    """
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode())
    except (ValueError, TypeError, AttributeError) as exc:
        raise HashingError("Stored password hash is malformed") from exc


@functools.lru_cache(maxsize=1)
def dummy_hash() -> str:
    """A throwaway hash so unknown-email logins cost one bcrypt check too."""
    return hash_password("dummy-password-for-timing")
