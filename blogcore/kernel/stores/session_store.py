"""
Session store - login session lifecycle.
"""

from datetime import timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogcore.kernel.identity.tokens import generate_session_token, redact_token
from blogcore.kernel.models import LoginSession, as_utc, utcnow
from blogcore.kernel.results import Result, StoreError
from blogcore.logging_config import get_logger

logger = get_logger(__name__)

# Attempts before giving up on finding an unused token
MAX_TOKEN_ATTEMPTS = 3


class SessionStore:
    """
    Maps opaque session tokens to the username they authenticate.

    Sessions live until end_session() unless ``ttl`` is given, in which case
    a session older than ``ttl`` resolves as NOT_FOUND and is removed by
    purge_expired().
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        token_bytes: int = 32,
        ttl: Optional[timedelta] = None,
    ):
        self._session_factory = session_factory
        self._token_bytes = token_bytes
        self._ttl = ttl

    @property
    def ttl(self) -> Optional[timedelta]:
        return self._ttl

    async def start_session(self, username: str) -> Result[str]:
        """
        Open a session for ``username`` and return its token.

        The token is inserted keyed by itself; a primary key collision just
        draws a fresh token.
        """
        for _ in range(MAX_TOKEN_ATTEMPTS):
            token = generate_session_token(self._token_bytes)
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        session.add(LoginSession(token=token, username=username))
            except IntegrityError:
                logger.warning("Session token collision, regenerating")
                continue
            except SQLAlchemyError:
                logger.exception("Failed to start session", extra={"username": username})
                return Result.failure(StoreError.STORAGE_ERROR)

            logger.info(
                "Session started",
                extra={"username": username, "token": redact_token(token)},
            )
            return Result.success(token)

        logger.error("Could not draw an unused session token", extra={"username": username})
        return Result.failure(StoreError.STORAGE_ERROR)

    async def lookup_username(self, token: Optional[str]) -> Result[str]:
        """Resolve a token to its username; NOT_FOUND if absent, ended or expired."""
        if not token:
            return Result.failure(StoreError.NOT_FOUND)

        try:
            async with self._session_factory() as session:
                login = await session.get(LoginSession, token)
        except SQLAlchemyError:
            logger.exception("Failed to look up session")
            return Result.failure(StoreError.STORAGE_ERROR)

        if login is None or self._is_expired(login):
            return Result.failure(StoreError.NOT_FOUND)
        return Result.success(login.username)

    async def end_session(self, token: Optional[str]) -> Result[None]:
        """Delete the session. Ending an unknown token is not an error."""
        if not token:
            return Result.success()

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(LoginSession).where(LoginSession.token == token)
                    )
        except SQLAlchemyError:
            logger.exception("Failed to end session")
            return Result.failure(StoreError.STORAGE_ERROR)

        logger.info("Session ended", extra={"token": redact_token(token)})
        return Result.success()

    async def purge_expired(self) -> Result[int]:
        """Delete sessions past the TTL and return how many went."""
        if self._ttl is None:
            return Result.success(0)

        cutoff = self._cutoff()
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(LoginSession).where(LoginSession.created_at < cutoff)
                    )
                    purged = result.rowcount
        except SQLAlchemyError:
            logger.exception("Failed to purge expired sessions")
            return Result.failure(StoreError.STORAGE_ERROR)

        if purged:
            logger.info("Purged expired sessions", extra={"count": purged})
        return Result.success(purged)

    def _cutoff(self):
        """Sessions created before this instant have expired."""
        return utcnow() - self._ttl

    def _is_expired(self, login: LoginSession) -> bool:
        if self._ttl is None:
            return False
        return as_utc(login.created_at) < self._cutoff()
