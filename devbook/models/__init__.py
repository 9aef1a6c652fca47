"""ORM models. Importing this package registers every table with Base.metadata."""

from devbook.models.post import PostRecord
from devbook.models.user import FollowerRecord, UserRecord

__all__ = ["UserRecord", "FollowerRecord", "PostRecord"]
