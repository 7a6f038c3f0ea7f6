"""
Post store - posts, their tags, and their comment threads.
"""

from typing import Iterable, Optional, Union

from sqlalchemy import DateTime, String, Text, insert, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from blogcore.kernel.models import Comment, Post, PostTag, utcnow
from blogcore.kernel.results import Result, StoreError
from blogcore.kernel.text import (
    blank_to_none,
    derive_permalink,
    encode_paragraphs,
    extract_tags,
)
from blogcore.logging_config import get_logger
from blogcore.schemas.post import PostRecord

logger = get_logger(__name__)

# Listing size when the caller names none
DEFAULT_LIST_LIMIT = 10


class PostStore:
    """
    Store for blog posts.

    Permalinks are unique: the posts table carries a unique index on
    ``permalink``, so a second post whose title derives to an existing slug is
    rejected with DUPLICATE_PERMALINK rather than shadowing the first one.

    Usage:
        store = PostStore(session_factory)
        result = await store.create_post("Hello, World!", "body", "foo,bar", "alice")
        if result.ok:
            permalink = result.value
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        recent_limit: int = DEFAULT_LIST_LIMIT,
        tag_limit: int = DEFAULT_LIST_LIMIT,
    ):
        self._session_factory = session_factory
        self._recent_limit = recent_limit
        self._tag_limit = tag_limit

    async def create_post(
        self,
        title: str,
        body: str,
        tags: Union[str, Iterable[str], None],
        author: str,
    ) -> Result[str]:
        """
        Create a post and return its permalink.

        Args:
            title: Post title; the permalink is derived from it
            body: Post body; line breaks become paragraph markup
            tags: Raw tags, a comma-separated string or list of strings
            author: Username of the author

        Returns:
            Result with the permalink, or DUPLICATE_PERMALINK / STORAGE_ERROR
        """
        permalink = derive_permalink(title)
        post = Post(
            title=title,
            author=author,
            body=encode_paragraphs(body),
            permalink=permalink,
            date=utcnow(),
            tag_links=[
                PostTag(tag=tag, position=position)
                for position, tag in enumerate(extract_tags(tags))
            ],
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(post)
        except IntegrityError:
            logger.info(
                "Rejected post with duplicate permalink",
                extra={"permalink": permalink, "author": author},
            )
            return Result.failure(StoreError.DUPLICATE_PERMALINK)
        except SQLAlchemyError:
            logger.exception("Failed to store post", extra={"permalink": permalink})
            return Result.failure(StoreError.STORAGE_ERROR)

        logger.info("Post created", extra={"permalink": permalink, "author": author})
        return Result.success(permalink)

    async def get_by_permalink(self, permalink: str) -> Result[PostRecord]:
        """Exact-match lookup by permalink."""
        query = _with_thread(select(Post)).where(Post.permalink == permalink)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                post = result.scalar_one_or_none()
                record = PostRecord.model_validate(post) if post else None
        except SQLAlchemyError:
            logger.exception("Failed to load post", extra={"permalink": permalink})
            return Result.failure(StoreError.STORAGE_ERROR)

        if record is None:
            return Result.failure(StoreError.NOT_FOUND)
        return Result.success(record)

    async def list_recent(self, limit: Optional[int] = None) -> Result[list[PostRecord]]:
        """Newest posts first, at most ``limit`` of them (the store default if None)."""
        if limit is None:
            limit = self._recent_limit
        return await self._list(_with_thread(select(Post)), limit)

    async def list_by_tag(
        self,
        tag: str,
        limit: Optional[int] = None,
    ) -> Result[list[PostRecord]]:
        """Newest posts carrying exactly ``tag`` (case-sensitive)."""
        if limit is None:
            limit = self._tag_limit
        query = (
            _with_thread(select(Post))
            .join(PostTag, PostTag.post_id == Post.id)
            .where(PostTag.tag == tag)
        )
        return await self._list(query, limit)

    async def append_comment(
        self,
        permalink: str,
        author: str,
        email: Optional[str],
        body: str,
    ) -> Result[None]:
        """
        Append a comment to the post addressed by ``permalink``.

        Runs as one INSERT ... SELECT against the post row, so concurrent
        appenders never overwrite each other and comment order is the order
        in which the inserts commit.

        Returns:
            Success, NOT_FOUND if no such post, or STORAGE_ERROR
        """
        source = select(
            Post.id,
            literal(author, String()),
            literal(blank_to_none(email), String()),
            literal(body, Text()),
            literal(utcnow(), DateTime(timezone=True)),
        ).where(Post.permalink == permalink)
        stmt = insert(Comment.__table__).from_select(
            ["post_id", "author", "email", "body", "created_at"],
            source,
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    inserted = result.rowcount
        except SQLAlchemyError:
            logger.exception("Failed to append comment", extra={"permalink": permalink})
            return Result.failure(StoreError.STORAGE_ERROR)

        if not inserted:
            return Result.failure(StoreError.NOT_FOUND)

        logger.debug("Comment appended", extra={"permalink": permalink})
        return Result.success()

    async def _list(self, query, limit: int) -> Result[list[PostRecord]]:
        if limit <= 0:
            return Result.success([])

        query = query.order_by(Post.date.desc(), Post.id.desc()).limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                records = [PostRecord.model_validate(p) for p in result.scalars().all()]
        except SQLAlchemyError:
            logger.exception("Failed to list posts")
            return Result.failure(StoreError.STORAGE_ERROR)
        return Result.success(records)


def _with_thread(query):
    """Eager-load tags and comments; lazy loads are unavailable under asyncio."""
    return query.options(
        selectinload(Post.tag_links),
        selectinload(Post.comments),
    )
