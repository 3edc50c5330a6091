"""
FastAPI dependencies for authentication.

Provides ``db_session``, the service accessors, and the request gate
``get_current_user_id`` used across all protected routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.directory import SqlUserDirectory, UserDirectory
from auth.errors import MalformedAuth, MissingAuth
from auth.jwt import TokenKind, TokenService
from auth.service import AuthService
from database.session import get_db_session

BEARER_PREFIX = "Bearer "


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_service(request: Request) -> TokenService:
    """The process-wide token service built by ``create_app``."""
    return request.app.state.token_service


def get_user_directory(
    session: AsyncSession = Depends(db_session),
) -> UserDirectory:
    return SqlUserDirectory(session)


def get_auth_service(
    directory: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(directory, tokens)


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """
    Extract and verify the Bearer access token, returning the
    authenticated ``user_id``.

    The id is also stored on ``request.state.user_id``.  The user record
    is not re-fetched; claims are trusted as of verification time.
    """
    if authorization is None:
        raise MissingAuth()
    if not authorization.startswith(BEARER_PREFIX):
        raise MalformedAuth()

    claims = tokens.verify(authorization[len(BEARER_PREFIX):], kind=TokenKind.ACCESS)
    request.state.user_id = claims.user_id
    return claims.user_id
