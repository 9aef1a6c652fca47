"""
Devbook API — Post Entity
==========================

What:  The `Post` entity, used both as the request payload (only `title`
       and `content` are taken from the client) and as the response body.
       `author_id`, `likes` and `author_nick` are always set by the server.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from devbook.exceptions import ValidationError


class Post(BaseModel):
    id: Optional[int] = Field(default=None, ge=0)
    title: str = ""
    content: str = ""
    author_id: Optional[int] = Field(default=None, ge=0)
    likes: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    author_nick: Optional[str] = None

    model_config = {"from_attributes": True}

    def prepare(self) -> None:
        self.validate_fields()
        self.format()

    def validate_fields(self) -> None:
        if not self.title.strip():
            raise ValidationError("title is required and cannot be blank")
        if not self.content.strip():
            raise ValidationError("content is required and cannot be blank")

    def format(self) -> None:
        self.title = self.title.strip()
        self.content = self.content.strip()


class PostPayload(BaseModel):
    """Body of POST /posts and PUT /posts/{postID}: the client-writable fields only."""
    title: str = ""
    content: str = ""
