"""Route for POST /login."""

from typing import List

from devbook.controllers.auth import AuthController
from devbook.routes.table import Route


def auth_routes(controller: AuthController) -> List[Route]:
    return [
        Route(
            uri="/login",
            method="POST",
            handler=controller.login,
            requires_auth=False,
            summary="Exchange email and password for a bearer token",
            tag="Auth",
        ),
    ]
