"""
Devbook API — Entities & Request/Response Schemas
==================================================

What:  Pydantic models for the API contract. `User` and `Post` are the
       request-scoped entities controllers validate (`prepare()`) before
       handing them to a repository. The `*Response` models define exactly
       what leaves the server (no password field anywhere).
"""

from devbook.schemas.common import ErrorResponse, HealthResponse
from devbook.schemas.post import Post, PostPayload
from devbook.schemas.user import (
    Credentials,
    PasswordChange,
    User,
    UserMode,
    UserPayload,
    UserResponse,
)

__all__ = [
    "Credentials",
    "ErrorResponse",
    "HealthResponse",
    "PasswordChange",
    "Post",
    "PostPayload",
    "User",
    "UserMode",
    "UserPayload",
    "UserResponse",
]
