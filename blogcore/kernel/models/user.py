"""
User model for identity management.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from blogcore.kernel.models.base import Base, CreatedAtMixin


class User(Base, CreatedAtMixin):
    """User account model. The username is the identity key."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    # bcrypt hash, never the submitted password
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
