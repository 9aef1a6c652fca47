"""
Devbook API — Post Controller
==============================

What:  Handlers for /posts and /users/{id}/posts.

Business rules:
    - The author of a new post is always the authenticated caller; any
      author/likes/nick sent in the payload is ignored.
    - Only the author may update or delete a post (403 otherwise).
    - Like/deslike delegate the arithmetic to the repository's atomic
      update; the controller never reads the counter.
"""

import logging
from typing import List

from starlette.requests import Request
from starlette.responses import Response

from devbook.controllers.base import Controller, parse_id, read_json
from devbook.exceptions import ForbiddenError, NotFoundError
from devbook.repositories.base import PostRepository
from devbook.schemas.post import Post, PostPayload
from devbook.security import TokenIssuer, is_owner

logger = logging.getLogger(__name__)


class PostController(Controller):

    def __init__(
        self,
        post_repository: PostRepository,
        token_issuer: TokenIssuer,
        persistence_timeout: float,
    ):
        super().__init__(token_issuer, persistence_timeout)
        self._posts = post_repository

    async def _existing_post(self, post_id: int) -> Post:
        post = await self.persist("find_post", self._posts.find_by_id(post_id))
        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return post

    async def create(self, request: Request) -> Post:
        author_id = self.caller_id(request)

        payload = await read_json(request, PostPayload)
        post = Post(title=payload.title, content=payload.content, author_id=author_id)
        post.prepare()

        return await self.persist("create_post", self._posts.create(post))

    async def index(self, request: Request) -> List[Post]:
        """Feed: the caller's posts and posts of everyone they follow, newest first."""
        user_id = self.caller_id(request)
        return await self.persist("index_posts", self._posts.index(user_id))

    async def show(self, post_id: str) -> Post:
        return await self._existing_post(parse_id(post_id, "postID"))

    async def update(self, post_id: str, request: Request) -> Response:
        caller_id = self.caller_id(request)
        target_id = parse_id(post_id, "postID")

        stored = await self._existing_post(target_id)
        if not is_owner(caller_id, stored.author_id):
            raise ForbiddenError("you cannot update a post that is not yours")

        payload = await read_json(request, PostPayload)
        post = Post(title=payload.title, content=payload.content)
        post.prepare()

        await self.persist("update_post", self._posts.update(target_id, post))
        return Response(status_code=204)

    async def delete(self, post_id: str, request: Request) -> Response:
        caller_id = self.caller_id(request)
        target_id = parse_id(post_id, "postID")

        stored = await self._existing_post(target_id)
        if not is_owner(caller_id, stored.author_id):
            raise ForbiddenError("you cannot delete a post that is not yours")

        await self.persist("delete_post", self._posts.delete(target_id))
        logger.info("Post %s deleted by user %s", target_id, caller_id)
        return Response(status_code=204)

    async def find_by_user(self, user_id: str) -> List[Post]:
        author_id = parse_id(user_id, "userID")
        return await self.persist("find_posts_by_user", self._posts.find_by_user(author_id))

    async def like(self, post_id: str) -> Response:
        target_id = parse_id(post_id, "postID")
        await self._existing_post(target_id)
        await self.persist("like_post", self._posts.like_post(target_id))
        return Response(status_code=204)

    async def deslike(self, post_id: str) -> Response:
        target_id = parse_id(post_id, "postID")
        await self._existing_post(target_id)
        await self.persist("deslike_post", self._posts.deslike_post(target_id))
        return Response(status_code=204)
