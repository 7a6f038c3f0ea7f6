"""
Record schemas returned by the stores.
"""

from blogcore.schemas.post import CommentRecord, PostRecord
from blogcore.schemas.user import UserRecord

__all__ = [
    "CommentRecord",
    "PostRecord",
    "UserRecord",
]
