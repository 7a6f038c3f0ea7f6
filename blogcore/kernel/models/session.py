"""
Login session model.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from blogcore.kernel.models.base import Base, CreatedAtMixin


class LoginSession(Base, CreatedAtMixin):
    """Maps an opaque session token to the username it authenticates."""

    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<LoginSession {self.token[:8]}... user={self.username}>"
