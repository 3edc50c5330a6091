"""
Auth orchestration for signup, login, refresh, password and profile changes.

Each flow is a single sequence over the user directory, the password
hasher and the token service.  No flow persists tokens.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.directory import UserDirectory
from auth.errors import DuplicateEmail, InvalidCredentials, InvalidToken, UserNotFound
from auth.jwt import TokenKind, TokenService
from auth.models import AuthResult, User
from auth.password import dummy_hash, hash_password, verify_password

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "KRW"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, directory: UserDirectory, tokens: TokenService) -> None:
        self.directory = directory
        self.tokens = tokens

    def _issue_pair(self, user: User) -> AuthResult:
        return AuthResult(
            user=user,
            access_token=self.tokens.issue_access(user.id, user.email),
            refresh_token=self.tokens.issue_refresh(user.id, user.email),
        )

    async def signup(
        self,
        email: str,
        password: str,
        nickname: str,
        invite_code: Optional[str] = None,
    ) -> AuthResult:
        """Register a new user and issue an access + refresh token pair."""
        email = normalize_email(email)
        if await self.directory.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(
            email=email,
            password_hash=hash_password(password),
            nickname=nickname,
            default_currency=DEFAULT_CURRENCY,
        )
        # The unique index still catches a concurrent signup that slipped
        # past the lookup above; the directory raises DuplicateEmail.
        user = await self.directory.create(user)

        if invite_code:
            # TODO: join the inviting group once group invites are served here.
            logger.info("Signup for user %s carried an invite code (not redeemed)", user.id)

        logger.info("Registered user %s (%s)", user.id, user.email)
        return self._issue_pair(user)

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and issue a fresh token pair.

        An unknown email and a wrong password raise the same
        ``InvalidCredentials`` so callers cannot probe which accounts exist.
        """
        user = await self.directory.find_by_email(normalize_email(email))
        if user is None:
            verify_password(password, dummy_hash())
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise InvalidCredentials()

        logger.info("Login: %s (%s)", user.nickname, user.id)
        return self._issue_pair(user)

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token (no rotation)."""
        claims = self.tokens.verify(refresh_token, kind=TokenKind.REFRESH)
        user = await self.directory.find_by_id(claims.user_id)
        if user is None:
            # Same response as a bad token so refresh does not reveal deleted accounts.
            logger.info("Refresh rejected: user %s no longer exists", claims.user_id)
            raise InvalidToken()

        logger.debug("Refreshed access token for user %s", user.id)
        return self.tokens.issue_access(user.id, user.email)

    async def get_user(self, user_id: int) -> User:
        user = await self.directory.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def change_password(
        self,
        user_id: int,
        current_password: str,
        new_password: str,
    ) -> User:
        """
        Replace the user's password hash.

        Tokens issued before the change stay valid until they expire.
        """
        user = await self.get_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        user = await self.directory.update(user)
        logger.info("Password changed for user %s", user.id)
        return user

    async def update_profile(self, user_id: int, nickname: str, email: str) -> User:
        """
        Change the user's nickname and email.

        Raises ``DuplicateEmail`` when another account already uses the
        email; the store's unique index catches a concurrent change.
        Tokens issued earlier keep the old email claim until they expire.
        """
        user = await self.get_user(user_id)
        email = normalize_email(email)

        owner = await self.directory.find_by_email(email)
        if owner is not None and owner.id != user.id:
            raise DuplicateEmail()

        user.nickname = nickname
        user.email = email
        user = await self.directory.update(user)
        logger.info("Profile updated for user %s", user.id)
        return user
