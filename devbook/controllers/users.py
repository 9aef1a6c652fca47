"""
Devbook API — User Controller
==============================

What:  Handlers for /users: registration, search, profile read/update/
       delete, follow/unfollow, follower lists and password change.

Mutating handlers run the same stages, stopping at the first failure:

    AuthCheck (401) → ParamParse (400) → OwnershipCheck (403)
        → BodyParse (422/400) → Validate (400) → Persist (500) → Respond

Ownership of a user account means the caller *is* that user, so the check
compares the token's user id with the path id.
"""

import logging
from typing import List

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from devbook.controllers.base import Controller, parse_id, read_json
from devbook.exceptions import AuthenticationError, ForbiddenError, NotFoundError
from devbook.repositories.base import UserRepository
from devbook.schemas.user import PasswordChange, User, UserMode, UserPayload, UserResponse
from devbook.security import TokenIssuer, hash_password, is_owner, verify_password

logger = logging.getLogger(__name__)


def _public(users: List[User]) -> List[UserResponse]:
    return [UserResponse.model_validate(user) for user in users]


class UserController(Controller):

    def __init__(
        self,
        user_repository: UserRepository,
        token_issuer: TokenIssuer,
        persistence_timeout: float,
    ):
        super().__init__(token_issuer, persistence_timeout)
        self._users = user_repository

    async def create(self, request: Request) -> UserResponse:
        """Register a new user. The stored password is the bcrypt hash."""
        payload = await read_json(request, UserPayload)
        user = payload.to_user()
        # bcrypt is CPU bound; keep it off the event loop
        await run_in_threadpool(user.prepare, UserMode.REGISTER, hash_password)

        created = await self.persist("create_user", self._users.create(user))
        return UserResponse.model_validate(created)

    async def index(self, user: str = "") -> List[UserResponse]:
        """Search users whose name or nick contains `?user=` (case-insensitive)."""
        users = await self.persist("find_by_name_or_nick", self._users.find_by_name_or_nick(user))
        return _public(users)

    async def show(self, user_id: str) -> UserResponse:
        target_id = parse_id(user_id, "userID")
        user = await self.persist("find_user", self._users.find_by_id(target_id))
        if user is None:
            raise NotFoundError(resource="user", resource_id=target_id)
        return UserResponse.model_validate(user)

    async def update(self, user_id: str, request: Request) -> Response:
        caller_id = self.caller_id(request)
        target_id = parse_id(user_id, "userID")
        if not is_owner(caller_id, target_id):
            raise ForbiddenError("you cannot update a user that is not yours")

        payload = await read_json(request, UserPayload)
        user = payload.to_user()
        user.prepare(UserMode.UPDATE, hash_password)

        await self.persist("update_user", self._users.update(target_id, user))
        return Response(status_code=204)

    async def delete(self, user_id: str, request: Request) -> Response:
        caller_id = self.caller_id(request)
        target_id = parse_id(user_id, "userID")
        if not is_owner(caller_id, target_id):
            raise ForbiddenError("you cannot delete a user that is not yours")

        await self.persist("delete_user", self._users.delete(target_id))
        return Response(status_code=204)

    async def follow(self, user_id: str, request: Request) -> Response:
        follower_id = self.caller_id(request)
        target_id = parse_id(user_id, "userID")
        if is_owner(follower_id, target_id):
            raise ForbiddenError("you cannot follow yourself")

        target = await self.persist("find_user", self._users.find_by_id(target_id))
        if target is None:
            raise NotFoundError(resource="user", resource_id=target_id)

        await self.persist("follow", self._users.follow(target_id, follower_id))
        return Response(status_code=204)

    async def unfollow(self, user_id: str, request: Request) -> Response:
        follower_id = self.caller_id(request)
        target_id = parse_id(user_id, "userID")
        if is_owner(follower_id, target_id):
            raise ForbiddenError("you cannot unfollow yourself")

        await self.persist("unfollow", self._users.unfollow(target_id, follower_id))
        return Response(status_code=204)

    async def followers(self, user_id: str) -> List[UserResponse]:
        target_id = parse_id(user_id, "userID")
        users = await self.persist("search_followers", self._users.search_followers(target_id))
        return _public(users)

    async def following(self, user_id: str) -> List[UserResponse]:
        target_id = parse_id(user_id, "userID")
        users = await self.persist("search_following", self._users.search_following(target_id))
        return _public(users)

    async def update_password(self, user_id: str, request: Request) -> Response:
        """
        Change the caller's password.

        The current password is re-verified against the stored hash first;
        a mismatch is a 401, not a 403, since the caller owns the account
        but failed to prove knowledge of its password.
        """
        caller_id = self.caller_id(request)
        target_id = parse_id(user_id, "userID")
        if not is_owner(caller_id, target_id):
            raise ForbiddenError("you cannot update the password of a user that is not yours")

        change = await read_json(request, PasswordChange)
        change.validate_fields()

        stored_hash = await self.persist("find_password", self._users.find_password(target_id))
        if stored_hash is None:
            raise NotFoundError(resource="user", resource_id=target_id)

        try:
            await run_in_threadpool(verify_password, stored_hash, change.current)
        except AuthenticationError:
            raise AuthenticationError("current password does not match")

        new_hash = await run_in_threadpool(hash_password, change.new)
        await self.persist("update_password", self._users.update_password(target_id, new_hash))
        logger.info("User %s changed their password", target_id)
        return Response(status_code=204)
