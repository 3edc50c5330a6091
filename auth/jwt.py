"""
JWT access / refresh token issuance and verification.

Tokens are standard three-segment JWTs (header.payload.signature, each
base64url-encoded) signed with HMAC-SHA256 via PyJWT.  A single secret
signs both kinds; the ``type`` claim tells them apart.

Verification is stateless: signature + expiry + kind, nothing else.  There
is no server-side session store and no blacklist, so a token stays valid
until ``exp`` passes or the secret is rotated.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.utils import base64url_decode, base64url_encode

from auth.errors import ConfigurationError, InvalidToken
from config.settings import Settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(minutes=15)
REFRESH_TOKEN_TTL = timedelta(days=7)

_REQUIRED_CLAIMS = ["user_id", "email", "type", "exp", "iat"]


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Claims:
    user_id: int
    email: str
    kind: TokenKind
    exp: int
    iat: int

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Claims":
        return cls(
            user_id=int(payload["user_id"]),
            email=str(payload["email"]),
            kind=TokenKind(payload["type"]),
            exp=int(payload["exp"]),
            iat=int(payload["iat"]),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "type": self.kind.value,
            "exp": self.exp,
            "iat": self.iat,
        }


class TokenService:
    """Issues and verifies signed, time-bound bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        access_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_ttl: timedelta = REFRESH_TOKEN_TTL,
    ) -> None:
        if not secret:
            raise ConfigurationError("JWT_SECRET is not set")
        self._secret = secret
        self._ttl = {
            TokenKind.ACCESS: access_ttl,
            TokenKind.REFRESH: refresh_ttl,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            access_ttl=timedelta(minutes=settings.access_token_ttl_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_ttl_days),
        )

    def __repr__(self) -> str:
        return f"TokenService(access_ttl={self._ttl[TokenKind.ACCESS]}, refresh_ttl={self._ttl[TokenKind.REFRESH]})"

    # ── Issuance ────────────────────────────────────────────────────────

    def issue(self, user_id: int, email: str, kind: TokenKind) -> str:
        now = datetime.now(timezone.utc)
        claims = Claims(
            user_id=user_id,
            email=email,
            kind=kind,
            exp=int((now + self._ttl[kind]).timestamp()),
            iat=int(now.timestamp()),
        )
        return jwt.encode(claims.to_payload(), self._secret, algorithm=ALGORITHM)

    def issue_access(self, user_id: int, email: str) -> str:
        """Short-lived token presented on every protected request."""
        return self.issue(user_id, email, TokenKind.ACCESS)

    def issue_refresh(self, user_id: int, email: str) -> str:
        """Long-lived token exchanged for new access tokens."""
        return self.issue(user_id, email, TokenKind.REFRESH)

    # ── Verification ────────────────────────────────────────────────────

    def verify(self, token: str, kind: Optional[TokenKind] = None) -> Claims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidToken`` on a bad signature, malformed structure,
        expiry in the past or, when ``kind`` is given, a token of another
        kind.  The caller is not told which check failed.
        """
        try:
            _require_canonical_signature(token)
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": _REQUIRED_CLAIMS},
            )
            claims = Claims.from_payload(payload)
        except (jwt.InvalidTokenError, ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise InvalidToken() from exc

        if kind is not None and claims.kind is not kind:
            logger.debug("Token rejected: expected %s, got %s", kind.value, claims.kind.value)
            raise InvalidToken()
        return claims


def _require_canonical_signature(token: str) -> None:
    """
    Reject signatures whose base64url text does not round-trip.

    The last character of an HS256 signature carries unused padding bits;
    without this check, editing them would still decode to the same MAC.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise jwt.DecodeError("Token must have three segments")
    signature = parts[2]
    if base64url_encode(base64url_decode(signature)).decode("ascii") != signature:
        raise jwt.InvalidSignatureError("Non-canonical signature encoding")
