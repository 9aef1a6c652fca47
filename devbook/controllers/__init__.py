"""
Devbook API — Resource Controllers
===================================

What:  Per-resource request handlers holding the authorization and
       orchestration logic. Each controller is constructed with the
       repositories it needs and the shared TokenIssuer; their bound
       methods are the endpoints registered by the route table.
"""

from devbook.controllers.auth import AuthController
from devbook.controllers.posts import PostController
from devbook.controllers.users import UserController

__all__ = ["AuthController", "UserController", "PostController"]
