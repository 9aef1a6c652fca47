"""
Devbook API — Repositories
===========================

What:  Persistence layer. Controllers only ever see the abstract
       UserRepository / PostRepository; create_app() injects the SQL
       implementations, the test suite injects in-memory ones.
"""

from devbook.repositories.base import PostRepository, UserRepository
from devbook.repositories.post_repository import SqlPostRepository
from devbook.repositories.user_repository import SqlUserRepository

__all__ = ["UserRepository", "PostRepository", "SqlUserRepository", "SqlPostRepository"]
