"""
Post models - posts, their tags, and their comment threads.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogcore.kernel.models.base import Base, CreatedAtMixin, utcnow


class Post(Base):
    """A published blog post."""

    __tablename__ = "posts"

    # Autoincrement id doubles as insertion order for date ties
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    # Weak reference: not a foreign key to users
    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    permalink: Mapped[str] = mapped_column(
        String(512),
        unique=True,
        index=True,
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(
        default=utcnow,
        nullable=False,
        index=True,
    )

    # Relationships
    tag_links: Mapped[List["PostTag"]] = relationship(
        "PostTag",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostTag.position",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )

    @property
    def tags(self) -> list[str]:
        return [link.tag for link in self.tag_links]

    def __repr__(self) -> str:
        return f"<Post {self.permalink}>"


class PostTag(Base):
    """One tag on a post, kept in the order it was supplied."""

    __tablename__ = "post_tags"
    __table_args__ = (
        UniqueConstraint("post_id", "tag", name="uq_post_tags_post_tag"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    post: Mapped["Post"] = relationship(
        "Post",
        back_populates="tag_links",
    )


class Comment(Base, CreatedAtMixin):
    """A reader comment. Append-only; ordered by id."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    post: Mapped["Post"] = relationship(
        "Post",
        back_populates="comments",
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} by {self.author}>"
