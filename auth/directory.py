"""
The user directory: the store of user records the auth core reads and writes.

``UserDirectory`` is the interface the auth service depends on;
``SqlUserDirectory`` implements it on an async SQLAlchemy session.  Email
uniqueness is enforced by the ``users.email`` unique index, and a
violation surfaces as ``DuplicateEmail`` so concurrent signups cannot
both succeed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import DuplicateEmail
from auth.models import User

logger = logging.getLogger(__name__)


class UserDirectory(ABC):
    """Lookup / create / update of user records."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Persist a new user and return it with ``id`` assigned.

        Raises:
            DuplicateEmail: the email is already taken.
        """

    @abstractmethod
    async def update(self, user: User) -> User:
        ...


class SqlUserDirectory(UserDirectory):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def create(self, user: User) -> User:
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info("Unique constraint rejected signup for %s", user.email)
            raise DuplicateEmail() from exc
        return user

    async def update(self, user: User) -> User:
        merged = await self._session.merge(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateEmail() from exc
        return merged
