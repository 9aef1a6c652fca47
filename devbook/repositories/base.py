"""
Devbook API — Repository Interfaces
====================================

What:  Abstract base classes defining the persistence contract the
       controllers depend on.
How:   Concrete implementations (SqlUserRepository, SqlPostRepository, and
       the in-memory fakes of the test suite) inherit from these and are
       injected into the controllers by create_app().

Contract notes:
    - Lookups by id/email return None when nothing matches.
    - follow() is idempotent; unfollow() of a missing edge is a no-op.
    - like_post()/deslike_post() must be a single atomic update in the
      store; deslike never takes the counter below zero.
    - Implementations raise whatever their driver raises; the controllers
      turn every repository exception into a PersistenceError (500).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from devbook.schemas.post import Post
from devbook.schemas.user import User

# Id columns are signed 64-bit integers while path ids may use the full
# unsigned range; ids above this cannot exist in storage
MAX_STORED_ID = 2**63 - 1


def is_storable_id(*ids: int) -> bool:
    return all(0 <= value <= MAX_STORED_ID for value in ids)


class UserRepository(ABC):
    """Persistence contract for users and follow edges."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a user (password already hashed) and return it with its id."""
        ...

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Return the user without the password hash, or None."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Return only `id` and `password` (hash) for the given email, or None.

        Used solely by the login flow.
        """
        ...

    @abstractmethod
    async def find_by_name_or_nick(self, name_or_nick: str) -> List[User]:
        """Case-insensitive substring search over name and nick."""
        ...

    @abstractmethod
    async def update(self, user_id: int, user: User) -> None:
        """Overwrite name, nick and email."""
        ...

    @abstractmethod
    async def delete(self, user_id: int) -> None:
        ...

    @abstractmethod
    async def follow(self, user_id: int, follower_id: int) -> None:
        """Make `follower_id` follow `user_id`. Following twice is a no-op."""
        ...

    @abstractmethod
    async def unfollow(self, user_id: int, follower_id: int) -> None:
        ...

    @abstractmethod
    async def search_followers(self, user_id: int) -> List[User]:
        """Users following `user_id`."""
        ...

    @abstractmethod
    async def search_following(self, user_id: int) -> List[User]:
        """Users `user_id` follows."""
        ...

    @abstractmethod
    async def find_password(self, user_id: int) -> Optional[str]:
        """Stored password hash, or None when the user does not exist."""
        ...

    @abstractmethod
    async def update_password(self, user_id: int, hashed_password: str) -> None:
        ...


class PostRepository(ABC):
    """Persistence contract for posts."""

    @abstractmethod
    async def create(self, post: Post) -> Post:
        """
        Insert a post and return it as re-read from storage, including the
        server-assigned id and the author's nick.
        """
        ...

    @abstractmethod
    async def find_by_id(self, post_id: int) -> Optional[Post]:
        ...

    @abstractmethod
    async def index(self, user_id: int) -> List[Post]:
        """
        Feed of `user_id`: posts authored by the user or by anyone the user
        follows, without duplicates, newest (highest id) first.
        """
        ...

    @abstractmethod
    async def update(self, post_id: int, post: Post) -> None:
        """Overwrite title and content. Author and likes are never changed here."""
        ...

    @abstractmethod
    async def delete(self, post_id: int) -> None:
        ...

    @abstractmethod
    async def find_by_user(self, user_id: int) -> List[Post]:
        """Posts authored by exactly `user_id`, newest first."""
        ...

    @abstractmethod
    async def like_post(self, post_id: int) -> None:
        """Increment the like counter by exactly one."""
        ...

    @abstractmethod
    async def deslike_post(self, post_id: int) -> None:
        """Decrement the like counter by one, never below zero."""
        ...
