"""
User store - account creation and credential checks.
"""

import asyncio
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogcore.kernel.identity.password import PasswordHasher
from blogcore.kernel.models import User
from blogcore.kernel.results import Result, StoreError
from blogcore.kernel.text import blank_to_none
from blogcore.logging_config import get_logger
from blogcore.schemas.user import UserRecord

logger = get_logger(__name__)


class UserStore:
    """
    Store for user accounts.

    The username is the primary key of the users table, so the database
    itself serializes competing signups: of two concurrent inserts for one
    username exactly one commits and the other fails its constraint.

    bcrypt runs in a worker thread so a signup or login never stalls the
    event loop.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: Optional[PasswordHasher] = None,
    ):
        self._session_factory = session_factory
        self._hasher = hasher or PasswordHasher()
        # Verified against when the username is unknown, so a miss costs
        # the same as a wrong password. Built on first use.
        self._dummy_hash: Optional[str] = None

    async def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
    ) -> Result[UserRecord]:
        """
        Register a new user.

        Args:
            username: Unique username
            password: Plain text password; only its hash is stored
            email: Optional email; empty string is stored as absent

        Returns:
            Result with the created UserRecord, or DUPLICATE_USERNAME /
            STORAGE_ERROR
        """
        user = User(
            username=username,
            password=await asyncio.to_thread(self._hasher.hash, password),
            email=blank_to_none(email),
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(user)
                record = UserRecord.model_validate(user)
        except IntegrityError:
            logger.info("Username already registered", extra={"username": username})
            return Result.failure(StoreError.DUPLICATE_USERNAME)
        except SQLAlchemyError:
            logger.exception("Failed to create user", extra={"username": username})
            return Result.failure(StoreError.STORAGE_ERROR)

        logger.info("User created", extra={"username": username})
        return Result.success(record)

    async def validate_credentials(self, username: str, password: str) -> Result[UserRecord]:
        """
        Check a username/password pair.

        A matching password whose hash was made with a different cost factor
        is re-hashed with the current one.

        Returns:
            Result with the UserRecord on a match; INVALID_CREDENTIALS for an
            unknown user and a wrong password alike; STORAGE_ERROR if the
            lookup fails
        """
        try:
            async with self._session_factory() as session:
                user = await session.get(User, username)
        except SQLAlchemyError:
            logger.exception("Failed to load user", extra={"username": username})
            return Result.failure(StoreError.STORAGE_ERROR)

        if user is None:
            dummy_hash = await self._get_dummy_hash()
            await asyncio.to_thread(self._hasher.verify, password, dummy_hash)
            return Result.failure(StoreError.INVALID_CREDENTIALS)

        if not await asyncio.to_thread(self._hasher.verify, password, user.password):
            logger.info("Rejected login", extra={"username": username})
            return Result.failure(StoreError.INVALID_CREDENTIALS)

        if self._hasher.needs_rehash(user.password):
            await self._upgrade_hash(username, password)

        return Result.success(UserRecord.model_validate(user))

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(self._hasher.hash, "dummy-password")
        return self._dummy_hash

    async def _upgrade_hash(self, username: str, password: str) -> None:
        new_hash = await asyncio.to_thread(self._hasher.hash, password)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        update(User).where(User.username == username).values(password=new_hash)
                    )
        except SQLAlchemyError:
            # The login itself succeeded; the old hash stays valid
            logger.exception("Failed to upgrade password hash", extra={"username": username})
            return

        logger.info("Password hash upgraded", extra={"username": username})
