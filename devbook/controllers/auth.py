"""
Devbook API — Authentication Controller
========================================

What:  POST /login: exchange email + password for a bearer token.
How:   Look up the stored hash by email, verify with bcrypt, mint a token.

Unknown email and wrong password produce the same 401 "invalid
credentials" response, so the endpoint does not reveal which emails are
registered.
"""

import logging

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from devbook.controllers.base import Controller, read_json
from devbook.exceptions import AuthenticationError
from devbook.repositories.base import UserRepository
from devbook.schemas.user import Credentials
from devbook.security import TokenIssuer, verify_password

logger = logging.getLogger(__name__)


class AuthController(Controller):

    def __init__(
        self,
        user_repository: UserRepository,
        token_issuer: TokenIssuer,
        persistence_timeout: float,
    ):
        super().__init__(token_issuer, persistence_timeout)
        self._users = user_repository

    async def login(self, request: Request) -> PlainTextResponse:
        """Returns the token itself as the response body (not JSON)."""
        credentials = await read_json(request, Credentials)

        stored = await self.persist("find_by_email", self._users.find_by_email(credentials.email))
        if stored is None or stored.id is None:
            logger.info("Login rejected: unknown email")
            raise AuthenticationError()

        await run_in_threadpool(verify_password, stored.password, credentials.password)

        token = self._tokens.issue_token(stored.id)
        logger.info("User %s logged in", stored.id)
        return PlainTextResponse(token, status_code=200)
