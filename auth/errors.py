"""
Authentication error taxonomy.

Every error carries the HTTP status it maps to and a short machine-readable
``code``; ``api.errors`` renders them as JSON responses.
"""

from __future__ import annotations

from fastapi import status


class ConfigurationError(RuntimeError):
    """Fatal startup misconfiguration (e.g. no signing secret)."""


class AuthError(Exception):
    status_code: int = status.HTTP_401_UNAUTHORIZED
    code: str = "auth_error"
    default_message: str = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(AuthError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_email"
    default_message = "Email already registered"


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class InvalidToken(AuthError):
    code = "invalid_token"
    default_message = "Invalid or expired token"


class UserNotFound(AuthError):
    # 401 rather than 404 so refresh does not reveal whether an account exists.
    code = "user_not_found"
    default_message = "User not found"


class MissingAuth(AuthError):
    code = "missing_auth"
    default_message = "Missing Authorization header"


class MalformedAuth(AuthError):
    code = "malformed_auth"
    default_message = "Authorization header must use the Bearer scheme"


class HashingError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "hashing_error"
    default_message = "Password hashing failed"
