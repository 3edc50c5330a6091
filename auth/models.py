"""
Auth-layer value types.

``User`` is re-exported from the database package so auth code imports it
from one place.
"""

from __future__ import annotations

from dataclasses import dataclass

from database.models import User


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful signup or login."""

    user: User
    access_token: str
    refresh_token: str


__all__ = ["AuthResult", "User"]
