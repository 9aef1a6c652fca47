"""
Devbook API — SQLAlchemy Post Repository
=========================================

What:  PostRepository backed by async SQLAlchemy.
How:   Every read joins `users` to fill the denormalized `author_nick`.
       Like counters are changed with a single UPDATE statement
       (`likes = likes + 1`, `likes = CASE WHEN likes > 0 ...`) so
       concurrent likes never race in application code.

Feed query (index):
    SELECT p.*, u.nick FROM posts p JOIN users u ON p.author_id = u.id
    WHERE p.author_id = :uid
       OR p.author_id IN (SELECT user_id FROM followers WHERE follower_id = :uid)
    ORDER BY p.id DESC

    Each post row appears once no matter how many conditions it satisfies.
"""

import logging
from typing import List, Optional

from sqlalchemy import Select, case, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devbook.models.post import PostRecord
from devbook.models.user import FollowerRecord, UserRecord
from devbook.repositories.base import PostRepository, is_storable_id
from devbook.schemas.post import Post

logger = logging.getLogger(__name__)


def _posts_with_author() -> Select:
    return select(PostRecord, UserRecord.nick).join(
        UserRecord, PostRecord.author_id == UserRecord.id
    )


def _to_post(record: PostRecord, author_nick: Optional[str]) -> Post:
    return Post(
        id=record.id,
        title=record.title,
        content=record.content,
        author_id=record.author_id,
        likes=record.likes,
        created_at=record.created_at,
        author_nick=author_nick,
    )


class SqlPostRepository(PostRepository):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, post: Post) -> Post:
        async with self._session_factory() as session, session.begin():
            record = PostRecord(
                title=post.title,
                content=post.content,
                author_id=post.author_id,
            )
            session.add(record)
            await session.flush()
            post_id = record.id

        logger.info("Post %s created by user %s", post_id, post.author_id)
        created = await self.find_by_id(post_id)
        if created is None:
            raise RuntimeError(f"Post {post_id} vanished right after insert")
        return created

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        if not is_storable_id(post_id):
            return None
        async with self._session_factory() as session:
            result = await session.execute(
                _posts_with_author().where(PostRecord.id == post_id)
            )
            row = result.first()
            if row is None:
                return None
            return _to_post(row[0], row[1])

    async def index(self, user_id: int) -> List[Post]:
        if not is_storable_id(user_id):
            return []
        followed = select(FollowerRecord.user_id).where(
            FollowerRecord.follower_id == user_id
        )
        async with self._session_factory() as session:
            result = await session.execute(
                _posts_with_author()
                .where(
                    or_(
                        PostRecord.author_id == user_id,
                        PostRecord.author_id.in_(followed),
                    )
                )
                .order_by(PostRecord.id.desc())
            )
            return [_to_post(record, nick) for record, nick in result.all()]

    async def update(self, post_id: int, post: Post) -> None:
        if not is_storable_id(post_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                update(PostRecord)
                .where(PostRecord.id == post_id)
                .values(title=post.title, content=post.content)
                .execution_options(synchronize_session=False)
            )

    async def delete(self, post_id: int) -> None:
        if not is_storable_id(post_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                delete(PostRecord)
                .where(PostRecord.id == post_id)
                .execution_options(synchronize_session=False)
            )

    async def find_by_user(self, user_id: int) -> List[Post]:
        if not is_storable_id(user_id):
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                _posts_with_author()
                .where(PostRecord.author_id == user_id)
                .order_by(PostRecord.id.desc())
            )
            return [_to_post(record, nick) for record, nick in result.all()]

    async def like_post(self, post_id: int) -> None:
        if not is_storable_id(post_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                update(PostRecord)
                .where(PostRecord.id == post_id)
                .values(likes=PostRecord.likes + 1)
                .execution_options(synchronize_session=False)
            )

    async def deslike_post(self, post_id: int) -> None:
        if not is_storable_id(post_id):
            return
        async with self._session_factory() as session, session.begin():
            await session.execute(
                update(PostRecord)
                .where(PostRecord.id == post_id)
                .values(likes=case((PostRecord.likes > 0, PostRecord.likes - 1), else_=0))
                .execution_options(synchronize_session=False)
            )
