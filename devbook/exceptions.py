"""
Devbook API — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions, one per failure class of the
       request pipeline.
How:   Each exception carries a user-facing message, an optional context
       dict (logged, never returned) and the HTTP status it maps to.
       A single handler registered in main.py turns any DevbookError into
       the `{"error": "<message>"}` envelope.
Who:   Raised by security helpers, schemas and controllers.

Exception Hierarchy:
    DevbookError (base)
    ├── MalformedInputError      → 422 (request body could not be read)
    ├── ValidationError          → 400 (bad JSON or failed business validation)
    ├── UnauthorizedError        → 401 (missing/invalid/expired token)
    │   └── AuthenticationError  → 401 (password does not match)
    ├── ForbiddenError           → 403 (ownership or self-action violation)
    ├── NotFoundError            → 404
    ├── PersistenceError         → 500 (any repository failure)
    └── ConfigurationError       → raised at startup, never served
"""

from typing import Any, Dict, Optional


class DevbookError(Exception):
    """
    Base exception for all Devbook application errors.

    Attributes:
        message:     User-facing error description (returned in the envelope)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status the global handler responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class MalformedInputError(DevbookError):
    """The request body could not be read at all."""

    status_code = 422

    def __init__(
        self,
        message: str = "The request body could not be read",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(DevbookError):
    """
    Raised when client input fails decoding or validation.

    Covers both JSON decode failures and the semantic checks performed by
    `User.prepare()` / `Post.prepare()`. The message is human readable and
    not tied to a specific field.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(DevbookError):
    """Missing, malformed, badly signed or expired bearer token."""

    status_code = 401

    def __init__(
        self,
        message: str = "Invalid or missing authentication token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(UnauthorizedError):
    """A plaintext password did not match the stored hash."""

    def __init__(
        self,
        message: str = "invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(DevbookError):
    """
    The caller is authenticated but not allowed to perform the action.

    When: updating/deleting a post or user that belongs to someone else,
          following or unfollowing yourself.
    """

    status_code = 403

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevbookError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class PersistenceError(DevbookError):
    """
    A repository call failed or exceeded its deadline.

    The message returned to the client is always generic. The original
    error is kept in `context` and logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(DevbookError):
    """Required configuration is missing. Raised while the app is being built."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
