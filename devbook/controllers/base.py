"""
Devbook API — Controller Building Blocks
=========================================

What:  Helpers shared by every controller for the stages of a request:
       path parameter parsing, body reading/decoding, and deadline-bound
       repository calls.

Stage → failure mapping:
    parse_id          → ValidationError (400)
    read_json: read   → MalformedInputError (422)
    read_json: decode → ValidationError (400)
    persist           → PersistenceError (500), original error logged only
"""

import asyncio
import logging
import re
from typing import Awaitable, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import ClientDisconnect, Request

from devbook.exceptions import (
    DevbookError,
    MalformedInputError,
    PersistenceError,
    ValidationError,
)
from devbook.security import TokenIssuer

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")

MAX_ID = 2**64 - 1
_DIGITS = re.compile(r"[0-9]+")


def parse_id(raw: str, name: str = "id") -> int:
    """Parse a path parameter as an unsigned 64-bit integer."""
    if not _DIGITS.fullmatch(raw or ""):
        raise ValidationError(f"{name} must be an unsigned integer, got '{raw}'")
    value = int(raw)
    if value > MAX_ID:
        raise ValidationError(f"{name} is out of range")
    return value


async def read_json(request: Request, model: Type[ModelT]) -> ModelT:
    """
    Read the whole request body and decode it into `model`.

    Decoding covers both JSON syntax and field types, so `{"title": 5}`
    is rejected here with a 400 just like a truncated document.
    """
    try:
        body = await request.body()
    except (ClientDisconnect, OSError) as e:
        raise MalformedInputError(context={"original_error": type(e).__name__})

    try:
        return model.model_validate_json(body)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", "invalid JSON")
        message = f"invalid request body: {detail}"
        if location:
            message = f"invalid request body: {location}: {detail}"
        raise ValidationError(message)


class Controller:
    """
    Base class for resource controllers.

    Holds the token issuer (for caller identity) and the deadline applied to
    each repository call. Subclasses receive their repositories through
    their constructors.
    """

    def __init__(self, token_issuer: TokenIssuer, persistence_timeout: float):
        self._tokens = token_issuer
        self._persistence_timeout = persistence_timeout

    def caller_id(self, request: Request) -> int:
        """Identity of the authenticated caller (401 when the token is bad)."""
        return self._tokens.extract_user_id(request)

    async def persist(self, operation: str, call: Awaitable[ResultT]) -> ResultT:
        """
        Await a repository call under the request deadline.

        No retries: a failure or timeout becomes a PersistenceError right
        away. The client only sees the generic message.
        """
        try:
            return await asyncio.wait_for(call, timeout=self._persistence_timeout)
        except DevbookError:
            raise
        except asyncio.TimeoutError:
            logger.error(
                "Repository call '%s' exceeded %.1fs deadline",
                operation,
                self._persistence_timeout,
            )
            raise PersistenceError(context={"operation": operation, "error": "timeout"})
        except Exception as e:
            logger.error("Repository call '%s' failed: %s", operation, str(e), exc_info=True)
            raise PersistenceError(
                context={
                    "operation": operation,
                    "original_error": type(e).__name__,
                    "detail": str(e),
                },
            )
