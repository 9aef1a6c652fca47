"""
Devbook API — SQLAlchemy User Repository
=========================================

What:  UserRepository backed by async SQLAlchemy.
How:   Each method opens its own session and transaction from the injected
       session factory, so a repository instance holds no per-request state
       and can be shared by concurrent requests.

Query plans:
    find_by_id / find_password: primary key lookup
    find_by_email: unique index on users.email
    search_followers: followers PK (user_id, follower_id) → users PK
    follow: INSERT ... ON CONFLICT DO NOTHING (one statement, idempotent)
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devbook.models.post import PostRecord
from devbook.models.user import FollowerRecord, UserRecord
from devbook.repositories.base import UserRepository, is_storable_id
from devbook.schemas.user import User

logger = logging.getLogger(__name__)


def _to_user(record: UserRecord) -> User:
    """Convert a row to an entity, dropping the password hash."""
    return User(
        id=record.id,
        name=record.name,
        nick=record.nick,
        email=record.email,
        created_at=record.created_at,
    )


def _like_pattern(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _insert_ignoring_duplicates(dialect_name: str, user_id: int, follower_id: int):
    values = {"user_id": user_id, "follower_id": follower_id}
    if dialect_name == "postgresql":
        return pg_insert(FollowerRecord).values(**values).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite_insert(FollowerRecord).values(**values).on_conflict_do_nothing()
    if dialect_name in ("mysql", "mariadb"):
        return mysql_insert(FollowerRecord).values(**values).prefix_with("IGNORE")
    logger.warning("No insert-ignore support for dialect '%s'; duplicates will fail", dialect_name)
    return insert(FollowerRecord).values(**values)


class SqlUserRepository(UserRepository):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, user: User) -> User:
        async with self._session_factory() as session, session.begin():
            record = UserRecord(
                name=user.name,
                nick=user.nick,
                email=user.email,
                password=user.password,
            )
            session.add(record)
            await session.flush()
            logger.info("User %s created (nick=%s)", record.id, record.nick)
            return _to_user(record)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        async with self._session_factory() as session:
            record = await session.get(UserRecord, user_id)
            return _to_user(record) if record is not None else None

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserRecord.id, UserRecord.password).where(UserRecord.email == email)
            )
            row = result.first()
            if row is None:
                return None
            return User(id=row.id, password=row.password)

    async def find_by_name_or_nick(self, name_or_nick: str) -> List[User]:
        pattern = _like_pattern(name_or_nick)
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserRecord)
                .where(
                    or_(
                        UserRecord.name.ilike(pattern, escape="\\"),
                        UserRecord.nick.ilike(pattern, escape="\\"),
                    )
                )
                .order_by(UserRecord.id)
            )
            return [_to_user(record) for record in result.scalars().all()]

    async def update(self, user_id: int, user: User) -> None:
        if not is_storable_id(user_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                update(UserRecord)
                .where(UserRecord.id == user_id)
                .values(name=user.name, nick=user.nick, email=user.email)
                .execution_options(synchronize_session=False)
            )

    async def delete(self, user_id: int) -> None:
        if not is_storable_id(user_id):
            return
        # Dependent rows are removed explicitly; SQLite does not enforce
        # ON DELETE CASCADE unless foreign keys are switched on.
        async with self._session_factory() as session, session.begin():
            await session.execute(
                delete(FollowerRecord)
                .where(
                    or_(
                        FollowerRecord.user_id == user_id,
                        FollowerRecord.follower_id == user_id,
                    )
                )
                .execution_options(synchronize_session=False)
            )
            await session.execute(
                delete(PostRecord)
                .where(PostRecord.author_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await session.execute(
                delete(UserRecord)
                .where(UserRecord.id == user_id)
                .execution_options(synchronize_session=False)
            )
        logger.info("User %s deleted", user_id)

    async def follow(self, user_id: int, follower_id: int) -> None:
        if not is_storable_id(user_id, follower_id):
            return
        async with self._session_factory() as session, session.begin():
            dialect_name = session.get_bind().dialect.name
            await session.execute(
                _insert_ignoring_duplicates(dialect_name, user_id, follower_id)
            )

    async def unfollow(self, user_id: int, follower_id: int) -> None:
        if not is_storable_id(user_id, follower_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                delete(FollowerRecord)
                .where(
                    FollowerRecord.user_id == user_id,
                    FollowerRecord.follower_id == follower_id,
                )
                .execution_options(synchronize_session=False)
            )

    async def search_followers(self, user_id: int) -> List[User]:
        if not is_storable_id(user_id):
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserRecord)
                .join(FollowerRecord, UserRecord.id == FollowerRecord.follower_id)
                .where(FollowerRecord.user_id == user_id)
                .order_by(UserRecord.id)
            )
            return [_to_user(record) for record in result.scalars().all()]

    async def search_following(self, user_id: int) -> List[User]:
        if not is_storable_id(user_id):
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserRecord)
                .join(FollowerRecord, UserRecord.id == FollowerRecord.user_id)
                .where(FollowerRecord.follower_id == user_id)
                .order_by(UserRecord.id)
            )
            return [_to_user(record) for record in result.scalars().all()]

    async def find_password(self, user_id: int) -> Optional[str]:
        if not is_storable_id(user_id):
            return None
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserRecord.password).where(UserRecord.id == user_id)
            )
            return result.scalar_one_or_none()

    async def update_password(self, user_id: int, hashed_password: str) -> None:
        if not is_storable_id(user_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                update(UserRecord)
                .where(UserRecord.id == user_id)
                .values(password=hashed_password)
                .execution_options(synchronize_session=False)
            )
