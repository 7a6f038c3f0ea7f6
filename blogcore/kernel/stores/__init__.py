"""
Stores - the only code that talks to the database.

Each store receives the session factory at construction and returns Result
values; stores never call each other.
"""

from blogcore.kernel.stores.post_store import PostStore
from blogcore.kernel.stores.session_store import SessionStore
from blogcore.kernel.stores.user_store import UserStore

__all__ = [
    "PostStore",
    "SessionStore",
    "UserStore",
]
