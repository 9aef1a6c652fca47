"""
Devbook API — Post SQLAlchemy Model
====================================

What:  ORM model for the `posts` table.
Who:   Used by SqlPostRepository and by Alembic.

Query Patterns:
    - Feed: posts authored by a user or by anyone they follow, ORDER BY id DESC
      → primary key index + idx_posts_author_id
    - Posts of a user: WHERE author_id = :id → idx_posts_author_id
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, CheckConstraint, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from devbook.database import Base
from devbook.models.user import Identifier


class PostRecord(Base):
    """A post published by a user."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Only ever changed by single-statement UPDATEs in the repository
    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_posts_likes_non_negative"),
        Index("idx_posts_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<PostRecord(id={self.id}, author_id={self.author_id}, likes={self.likes})>"
