"""
User record schema. Credential material is never part of it.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class UserRecord(BaseModel):
    """A stored account; username is the identity key."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    username: str
    email: Optional[str] = None
    created_at: datetime

    @property
    def id(self) -> str:
        return self.username

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(include={"username", "email"}, exclude_none=True)
