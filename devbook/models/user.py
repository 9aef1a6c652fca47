"""
Devbook API — User & Follower SQLAlchemy Models
================================================

What:  ORM models for the `users` and `followers` tables.
Who:   Used by SqlUserRepository / SqlPostRepository and by Alembic.

Table Design:
    - users.id: BIGINT identity (unsigned 64-bit identifiers on the API side)
    - users.nick / users.email: unique
    - users.password: bcrypt hash, never selected by the listing queries
    - followers: one row per edge (user_id = followed, follower_id = follower)
      with a composite primary key, which is what makes "follow twice"
      collapse into a single row.
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, BigInteger, CheckConstraint, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from devbook.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns
Identifier = BigInteger().with_variant(Integer(), "sqlite")


class UserRecord(Base):
    """A registered user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    nick: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, nick='{self.nick}')>"


class FollowerRecord(Base):
    """Follow edge: `follower_id` follows `user_id`."""

    __tablename__ = "followers"

    user_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    follower_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    __table_args__ = (
        CheckConstraint("user_id <> follower_id", name="ck_followers_not_self"),
    )

    def __repr__(self) -> str:
        return f"<FollowerRecord(user_id={self.user_id}, follower_id={self.follower_id})>"
