"""
Shared fixtures: an in-memory user directory and a fast token/hash setup.
"""

import itertools
import os
from typing import Dict, Optional

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest

from auth.directory import UserDirectory
from auth.errors import DuplicateEmail
from auth.jwt import TokenService
from auth.models import User
from auth.service import AuthService


class InMemoryUserDirectory(UserDirectory):
    """Dict-backed directory with the same uniqueness rule as the DB."""

    def __init__(self) -> None:
        self.users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    async def create(self, user: User) -> User:
        if any(u.email == user.email for u in self.users.values()):
            raise DuplicateEmail()
        user.id = next(self._ids)
        self.users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        if any(u.email == user.email and u.id != user.id for u in self.users.values()):
            raise DuplicateEmail()
        self.users[user.id] = user
        return user


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-secret")


@pytest.fixture
def auth_service(directory, token_service) -> AuthService:
    return AuthService(directory, token_service)
