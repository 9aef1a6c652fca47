"""
Devbook API — User Routes
==========================

Route Inventory:
    POST   /users                            register (public)
    GET    /users?user=<substring>           search by name or nick
    GET    /users/{user_id}                  profile
    PUT    /users/{user_id}                  update own profile
    DELETE /users/{user_id}                  delete own account
    POST   /users/{user_id}/follow           follow
    POST   /users/{user_id}/unfollow         unfollow
    GET    /users/{user_id}/followers        who follows the user
    GET    /users/{user_id}/following        who the user follows
    POST   /users/{user_id}/update-password  change own password
"""

from typing import List

from devbook.controllers.users import UserController
from devbook.routes.table import Route


def user_routes(controller: UserController) -> List[Route]:
    return [
        Route("/users", "POST", controller.create, requires_auth=False,
              status_code=201, summary="Register a user", tag="Users"),
        Route("/users", "GET", controller.index, requires_auth=True,
              summary="Search users by name or nick", tag="Users"),
        Route("/users/{user_id}", "GET", controller.show, requires_auth=True,
              summary="Get a user", tag="Users"),
        Route("/users/{user_id}", "PUT", controller.update, requires_auth=True,
              status_code=204, summary="Update your own profile", tag="Users"),
        Route("/users/{user_id}", "DELETE", controller.delete, requires_auth=True,
              status_code=204, summary="Delete your own account", tag="Users"),
        Route("/users/{user_id}/follow", "POST", controller.follow, requires_auth=True,
              status_code=204, summary="Follow a user", tag="Followers"),
        Route("/users/{user_id}/unfollow", "POST", controller.unfollow, requires_auth=True,
              status_code=204, summary="Unfollow a user", tag="Followers"),
        Route("/users/{user_id}/followers", "GET", controller.followers, requires_auth=True,
              summary="List the followers of a user", tag="Followers"),
        Route("/users/{user_id}/following", "GET", controller.following, requires_auth=True,
              summary="List the users a user follows", tag="Followers"),
        Route("/users/{user_id}/update-password", "POST", controller.update_password,
              requires_auth=True, status_code=204, summary="Change your own password",
              tag="Users"),
    ]
