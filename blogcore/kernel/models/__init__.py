"""
Kernel Data Models

SQLAlchemy models for the posts, users and sessions collections.
"""

from blogcore.kernel.models.base import Base, CreatedAtMixin, as_utc, utcnow
from blogcore.kernel.models.post import Comment, Post, PostTag
from blogcore.kernel.models.session import LoginSession
from blogcore.kernel.models.user import User

__all__ = [
    # Base
    "Base",
    "CreatedAtMixin",
    "as_utc",
    "utcnow",
    # Posts
    "Post",
    "PostTag",
    "Comment",
    # Identity
    "User",
    "LoginSession",
]
