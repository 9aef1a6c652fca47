"""
Devbook API — Authentication Dependency
========================================

What:  Token check attached to every route marked `requires_auth`.
How:   `configure()` in devbook.routes adds `Depends(authenticator.require_token)`
       to those routes. FastAPI resolves it before the handler runs, so an
       UnauthorizedError here short-circuits the request with a 401 envelope.
"""

from starlette.requests import Request

from devbook.security import TokenIssuer


class Authenticator:

    def __init__(self, token_issuer: TokenIssuer):
        self._tokens = token_issuer

    async def require_token(self, request: Request) -> None:
        """Reject the request unless it carries a valid bearer token."""
        self._tokens.validate_token(request)
