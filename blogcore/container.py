"""
Composition root: builds the engine and the three stores from settings.

Usage:
    async with open_stores() as stores:
        token = (await stores.sessions.start_session("alice")).value
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from blogcore.config import Settings, get_settings
from blogcore.database import close_db, create_engine, create_session_factory, init_db
from blogcore.kernel.identity.password import PasswordHasher
from blogcore.kernel.stores import PostStore, SessionStore, UserStore
from blogcore.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass
class BlogStores:
    """The stores sharing one engine."""

    engine: AsyncEngine
    posts: PostStore
    users: UserStore
    sessions: SessionStore


def build_stores(engine: AsyncEngine, settings: Settings) -> BlogStores:
    """Wire the stores around an existing engine."""
    session_factory = create_session_factory(engine)
    ttl = (
        timedelta(minutes=settings.session_ttl_minutes)
        if settings.session_ttl_minutes is not None
        else None
    )
    return BlogStores(
        engine=engine,
        posts=PostStore(
            session_factory,
            recent_limit=settings.recent_posts_limit,
            tag_limit=settings.tag_posts_limit,
        ),
        users=UserStore(session_factory, PasswordHasher(rounds=settings.bcrypt_rounds)),
        sessions=SessionStore(
            session_factory,
            token_bytes=settings.session_token_bytes,
            ttl=ttl,
        ),
    )


@asynccontextmanager
async def open_stores(
    settings: Optional[Settings] = None,
    *,
    create_tables: bool = True,
    setup_logging: bool = True,
) -> AsyncIterator[BlogStores]:
    """
    Open the database, yield the stores, and dispose of the engine on exit.

    Args:
        settings: Settings to use; defaults to get_settings()
        create_tables: Create missing tables on startup
        setup_logging: Configure logging from the settings first
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    engine = create_engine(settings.database_url, echo=settings.debug)
    try:
        if create_tables:
            await init_db(engine)
            logger.info("Database initialized")
        yield build_stores(engine, settings)
    finally:
        logger.info("Shutting down...")
        await close_db(engine)
        logger.info("Database connections closed")
