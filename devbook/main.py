"""
Devbook API — FastAPI Application Factory
==========================================

What:  Builds and configures the FastAPI application.
How:   create_app() assembles the dependency graph explicitly and returns
       the configured app. Nothing request-related lives in module globals.
Who:   uvicorn (`uvicorn devbook.main:app`) and the test suite
       (`create_app(settings, user_repository=..., post_repository=...)`).

Dependency graph built by create_app():

    Settings
      ├── TokenIssuer (fails here without SECRET_KEY)
      └── AsyncEngine → session factory
              ├── SqlUserRepository ─┬─ AuthController
              │                      └─ UserController
              └── SqlPostRepository ─── PostController
    controllers → route lists → configure(app, routes, Authenticator)

Middleware chain (last added runs first):
    Request ID → Logging → GZip → CORS → route (auth dependency) → handler

Exception Handlers:
    DevbookError            → its status_code, {"error": message}
    RequestValidationError  → 400
    HTTPException           → its status (unknown route 404, bad method 405)
    Exception (fallback)    → 500, details logged only
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devbook import __version__
from devbook.config import Settings, settings
from devbook.controllers import AuthController, PostController, UserController
from devbook.database import create_engine_from_settings, create_session_factory
from devbook.exceptions import ConfigurationError, DevbookError
from devbook.middleware.authentication import Authenticator
from devbook.middleware.logging import RequestLoggingMiddleware
from devbook.middleware.request_id import RequestIDMiddleware, request_id_var
from devbook.repositories import (
    PostRepository,
    SqlPostRepository,
    SqlUserRepository,
    UserRepository,
)
from devbook.routes import health
from devbook.routes.auth import auth_routes
from devbook.routes.posts import post_routes
from devbook.routes.table import configure
from devbook.routes.users import user_routes
from devbook.security import TokenIssuer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure stdout logging for the whole application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request lines come from devbook.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Devbook API %s starting up...", __version__)
    logger.info("Server ready at http://%s:%d", app_settings.api_host, app_settings.api_port)
    logger.info("=" * 60)

    yield

    logger.info("Devbook API shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{"error": "<message>"}` envelope.

    5xx responses only ever carry the exception's generic message; the
    context (raw driver errors, operation names) goes to the log.
    """

    @app.exception_handler(DevbookError)
    async def handle_devbook_error(request: Request, exc: DevbookError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s",
                         rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"invalid request: {location}: {errors[0].get('msg', '')}"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error(500, "An unexpected error occurred. Please try again later.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    user_repository: Optional[UserRepository] = None,
    post_repository: Optional[PostRepository] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings:    Defaults to the environment-derived `settings`.
        user_repository: Defaults to SqlUserRepository on the configured database.
        post_repository: Defaults to SqlPostRepository on the configured database.

    Raises:
        ConfigurationError: SECRET_KEY is not configured.
    """
    app_settings = app_settings or settings
    try:
        app_settings.validate_required()
    except ValueError as e:
        raise ConfigurationError(str(e))

    token_issuer = TokenIssuer(
        app_settings.secret_key,
        expiration=timedelta(hours=app_settings.token_expiration_hours),
    )

    engine = create_engine_from_settings(app_settings)
    session_factory = create_session_factory(engine)
    if user_repository is None:
        user_repository = SqlUserRepository(session_factory)
    if post_repository is None:
        post_repository = SqlPostRepository(session_factory)

    timeout = app_settings.persistence_timeout_seconds
    auth_controller = AuthController(user_repository, token_issuer, timeout)
    user_controller = UserController(user_repository, token_issuer, timeout)
    post_controller = PostController(post_repository, token_issuer, timeout)

    app = FastAPI(
        title="Devbook API",
        description="Social network API: users, followers and posts.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine

    # ── Middleware ────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    configure(
        app,
        auth_routes(auth_controller) + user_routes(user_controller) + post_routes(post_controller),
        Authenticator(token_issuer),
    )
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn devbook.main:app`
app = create_app()
