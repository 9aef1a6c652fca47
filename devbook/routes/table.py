"""
Devbook API — Route Table
==========================

What:  The `Route` record (uri, method, handler, auth flag) and
       `configure()`, which registers a list of routes on the app.
How:   Route lists are built from controller instances by the functions in
       auth.py, users.py and posts.py; create_app() concatenates them and
       calls configure(). Routes flagged `requires_auth` get the token check
       as a route dependency.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable

from fastapi import Depends, FastAPI

from devbook.middleware.authentication import Authenticator
from devbook.schemas.common import ErrorResponse

_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"description": "Invalid path parameter or payload", "model": ErrorResponse},
    401: {"description": "Missing, invalid or expired token", "model": ErrorResponse},
    500: {"description": "Persistence failure", "model": ErrorResponse},
}


@dataclass(frozen=True)
class Route:
    uri: str
    method: str
    handler: Callable[..., Any]
    requires_auth: bool
    status_code: int = 200
    summary: str = ""
    tag: str = ""


def configure(app: FastAPI, routes: Iterable[Route], authenticator: Authenticator) -> None:
    """Register every route on `app`, guarding the protected ones."""
    for route in routes:
        dependencies = [Depends(authenticator.require_token)] if route.requires_auth else []
        app.add_api_route(
            route.uri,
            route.handler,
            methods=[route.method],
            status_code=route.status_code,
            dependencies=dependencies,
            summary=route.summary or None,
            tags=[route.tag] if route.tag else None,
            responses=_ERROR_RESPONSES,
        )
