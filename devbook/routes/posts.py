"""
Devbook API — Post Routes
==========================

Route Inventory:
    POST   /posts                     publish (author = caller)
    GET    /posts                     feed of the caller
    GET    /posts/{post_id}           single post
    PUT    /posts/{post_id}           update own post
    DELETE /posts/{post_id}           delete own post
    GET    /users/{user_id}/posts     posts authored by a user
    POST   /posts/{post_id}/like      +1 like
    POST   /posts/{post_id}/deslike   -1 like (never below zero)
"""

from typing import List

from devbook.controllers.posts import PostController
from devbook.routes.table import Route


def post_routes(controller: PostController) -> List[Route]:
    return [
        Route("/posts", "POST", controller.create, requires_auth=True,
              status_code=201, summary="Publish a post", tag="Posts"),
        Route("/posts", "GET", controller.index, requires_auth=True,
              summary="Feed: your posts and posts of users you follow", tag="Posts"),
        Route("/posts/{post_id}", "GET", controller.show, requires_auth=True,
              summary="Get a post", tag="Posts"),
        Route("/posts/{post_id}", "PUT", controller.update, requires_auth=True,
              status_code=204, summary="Update your own post", tag="Posts"),
        Route("/posts/{post_id}", "DELETE", controller.delete, requires_auth=True,
              status_code=204, summary="Delete your own post", tag="Posts"),
        Route("/users/{user_id}/posts", "GET", controller.find_by_user, requires_auth=True,
              summary="Posts authored by a user", tag="Posts"),
        Route("/posts/{post_id}/like", "POST", controller.like, requires_auth=True,
              status_code=204, summary="Like a post", tag="Posts"),
        Route("/posts/{post_id}/deslike", "POST", controller.deslike, requires_auth=True,
              status_code=204, summary="Remove a like from a post", tag="Posts"),
    ]
