"""
Result values returned by every store operation.

Stores never let storage exceptions cross their boundary; callers branch on
``result.ok`` / ``result.error`` instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class StoreError(str, Enum):
    """Why a store operation did not succeed."""
    NOT_FOUND = "not_found"
    DUPLICATE_USERNAME = "duplicate_username"
    DUPLICATE_PERMALINK = "duplicate_permalink"
    STORAGE_ERROR = "storage_error"
    INVALID_CREDENTIALS = "invalid_credentials"


class ResultError(Exception):
    """Raised by Result.unwrap() on a failed result."""

    def __init__(self, error: StoreError):
        super().__init__(error.value)
        self.error = error


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a StoreError, never both."""

    value: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: StoreError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising ResultError if this is a failure."""
        if self.error is not None:
            raise ResultError(self.error)
        return self.value  # type: ignore[return-value]
