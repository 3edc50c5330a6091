"""
SQLAlchemy ORM models for the ledger's user records.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase

# SQLite only autoincrements INTEGER primary keys.
_IdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(_IdType, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    nickname = Column(String(60), nullable=False)
    avatar_url = Column(String(512), nullable=True)
    group_id = Column(BigInteger, nullable=True)
    default_currency = Column(String(3), nullable=True, default="KRW")
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
