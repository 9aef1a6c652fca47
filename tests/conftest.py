"""
Devbook API — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── store:            Shared in-memory state behind both fake repositories
    ├── user_repository:  InMemoryUserRepository over `store`
    ├── post_repository:  InMemoryPostRepository over `store`
    ├── test_settings:    Settings pointing at in-memory SQLite
    ├── app / test_client: create_app() wired to the fakes + HTTPX AsyncClient
    ├── make_user / make_post: seed the fakes directly
    ├── auth_headers:     Bearer header for a given user id
    └── session_factory:  aiosqlite-backed sessions with the schema created,
                          for the SQL repository tests
"""

import os

# Override settings for testing BEFORE any devbook imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import itertools
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import devbook.models  # noqa: F401  (registers the tables on Base.metadata)
from devbook.config import Settings
from devbook.database import Base, create_session_factory
from devbook.main import create_app
from devbook.repositories.base import PostRepository, UserRepository
from devbook.schemas.post import Post
from devbook.schemas.user import User
from devbook.security import TokenIssuer, hash_password

TEST_SECRET = "test-secret-key"


# ══════════════════════════════════════════════════════════════════════════
# In-memory repositories
# ══════════════════════════════════════════════════════════════════════════

class InMemoryStore:
    """Tables shared by the two fake repositories, keyed like the SQL schema."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.followers: Set[Tuple[int, int]] = set()  # (user_id, follower_id)
        self.posts: Dict[int, Post] = {}
        self._user_ids = itertools.count(1)
        self._post_ids = itertools.count(1)

    def next_user_id(self) -> int:
        return next(self._user_ids)

    def next_post_id(self) -> int:
        return next(self._post_ids)


def _public(user: User) -> User:
    return user.model_copy(update={"password": ""})


class InMemoryUserRepository(UserRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, user: User) -> User:
        for existing in self.store.users.values():
            if existing.nick == user.nick or existing.email == user.email:
                raise RuntimeError("UNIQUE constraint failed: users.nick, users.email")
        stored = user.model_copy(
            update={"id": self.store.next_user_id(), "created_at": datetime.now(timezone.utc)}
        )
        self.store.users[stored.id] = stored
        return _public(stored)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        user = self.store.users.get(user_id)
        return _public(user) if user else None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.store.users.values():
            if user.email == email:
                return User(id=user.id, password=user.password)
        return None

    async def find_by_name_or_nick(self, name_or_nick: str) -> List[User]:
        needle = name_or_nick.lower()
        return [
            _public(user)
            for user in sorted(self.store.users.values(), key=lambda u: u.id)
            if needle in user.name.lower() or needle in user.nick.lower()
        ]

    async def update(self, user_id: int, user: User) -> None:
        stored = self.store.users.get(user_id)
        if stored is not None:
            self.store.users[user_id] = stored.model_copy(
                update={"name": user.name, "nick": user.nick, "email": user.email}
            )

    async def delete(self, user_id: int) -> None:
        self.store.users.pop(user_id, None)
        self.store.followers = {
            edge for edge in self.store.followers if user_id not in edge
        }
        self.store.posts = {
            pid: post for pid, post in self.store.posts.items() if post.author_id != user_id
        }

    async def follow(self, user_id: int, follower_id: int) -> None:
        self.store.followers.add((user_id, follower_id))

    async def unfollow(self, user_id: int, follower_id: int) -> None:
        self.store.followers.discard((user_id, follower_id))

    async def search_followers(self, user_id: int) -> List[User]:
        ids = sorted(f for (u, f) in self.store.followers if u == user_id)
        return [_public(self.store.users[i]) for i in ids]

    async def search_following(self, user_id: int) -> List[User]:
        ids = sorted(u for (u, f) in self.store.followers if f == user_id)
        return [_public(self.store.users[i]) for i in ids]

    async def find_password(self, user_id: int) -> Optional[str]:
        user = self.store.users.get(user_id)
        return user.password if user else None

    async def update_password(self, user_id: int, hashed_password: str) -> None:
        stored = self.store.users.get(user_id)
        if stored is not None:
            self.store.users[user_id] = stored.model_copy(update={"password": hashed_password})


class InMemoryPostRepository(PostRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, post: Post) -> Post:
        author = self.store.users[post.author_id]
        stored = post.model_copy(update={
            "id": self.store.next_post_id(),
            "likes": 0,
            "author_nick": author.nick,
            "created_at": datetime.now(timezone.utc),
        })
        self.store.posts[stored.id] = stored
        return stored.model_copy()

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        post = self.store.posts.get(post_id)
        return post.model_copy() if post else None

    async def index(self, user_id: int) -> List[Post]:
        followed = {u for (u, f) in self.store.followers if f == user_id}
        return [
            post.model_copy()
            for post in sorted(self.store.posts.values(), key=lambda p: p.id, reverse=True)
            if post.author_id == user_id or post.author_id in followed
        ]

    async def update(self, post_id: int, post: Post) -> None:
        stored = self.store.posts.get(post_id)
        if stored is not None:
            self.store.posts[post_id] = stored.model_copy(
                update={"title": post.title, "content": post.content}
            )

    async def delete(self, post_id: int) -> None:
        self.store.posts.pop(post_id, None)

    async def find_by_user(self, user_id: int) -> List[Post]:
        return [
            post.model_copy()
            for post in sorted(self.store.posts.values(), key=lambda p: p.id, reverse=True)
            if post.author_id == user_id
        ]

    async def like_post(self, post_id: int) -> None:
        stored = self.store.posts.get(post_id)
        if stored is not None:
            stored.likes += 1

    async def deslike_post(self, post_id: int) -> None:
        stored = self.store.posts.get(post_id)
        if stored is not None:
            stored.likes = max(0, stored.likes - 1)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def user_repository(store):
    return InMemoryUserRepository(store)


@pytest.fixture
def post_repository(store):
    return InMemoryPostRepository(store)


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        secret_key=TEST_SECRET,
        log_level="WARNING",
        persistence_timeout_seconds=1.0,
    )


@pytest.fixture
def token_issuer():
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def app(test_settings, user_repository, post_repository):
    return create_app(
        test_settings,
        user_repository=user_repository,
        post_repository=post_repository,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(store):
    """
    Seed a user straight into the store and return its id.

    The password is hashed the same way registration does, so the seeded
    user can log in with the plaintext.
    """
    def _make(nick: str, password: str = "secret", name: Optional[str] = None,
              email: Optional[str] = None) -> int:
        user_id = store.next_user_id()
        store.users[user_id] = User(
            id=user_id,
            name=name or nick.title(),
            nick=nick,
            email=email or f"{nick}@devbook.dev",
            password=hash_password(password),
            created_at=datetime.now(timezone.utc),
        )
        return user_id
    return _make


@pytest.fixture
def make_post(store):
    def _make(author_id: int, title: str = "Title", content: str = "Content",
              likes: int = 0) -> int:
        post_id = store.next_post_id()
        store.posts[post_id] = Post(
            id=post_id,
            title=title,
            content=content,
            author_id=author_id,
            likes=likes,
            author_nick=store.users[author_id].nick,
            created_at=datetime.now(timezone.utc),
        )
        return post_id
    return _make


@pytest.fixture
def auth_headers(token_issuer):
    """Build an Authorization header carrying a valid token for `user_id`."""
    def _headers(user_id: int) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token_issuer.issue_token(user_id)}"}
    return _headers


@pytest_asyncio.fixture
async def session_factory():
    """
    Sessions on a private in-memory SQLite database with the schema created.

    StaticPool keeps the single connection (and so the database) alive for
    the whole test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()
