"""
Post record schemas handed to callers of the post store.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommentRecord(BaseModel):
    """A comment as stored on its post."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    author: str
    email: Optional[str] = None
    body: str

    def to_document(self) -> dict[str, Any]:
        """Document form; the email key is omitted when absent."""
        return self.model_dump(exclude_none=True)


class PostRecord(BaseModel):
    """A post with its tags and comment thread."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    title: str
    author: str
    body: str
    permalink: str
    tags: List[str] = Field(default_factory=list)
    comments: List[CommentRecord] = Field(default_factory=list)
    date: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "body": self.body,
            "permalink": self.permalink,
            "tags": list(self.tags),
            "comments": [c.to_document() for c in self.comments],
            "date": self.date,
        }
