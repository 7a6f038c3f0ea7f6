"""Integration tests for the session store against SQLite."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select, update

from blogcore.kernel.models import LoginSession, utcnow
from blogcore.kernel.results import StoreError
from blogcore.kernel.stores import SessionStore


async def _set_created_at(session_factory, token: str, when: datetime) -> None:
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                update(LoginSession)
                .where(LoginSession.token == token)
                .values(created_at=when)
            )


async def _age_session(session_factory, token: str, age: timedelta) -> None:
    await _set_created_at(session_factory, token, utcnow() - age)


class TestSessionLifecycle:
    """Start, look up and end sessions."""

    @pytest.mark.asyncio
    async def test_start_then_lookup(self, session_store: SessionStore):
        token = (await session_store.start_session("alice")).unwrap()

        result = await session_store.lookup_username(token)

        assert result.ok
        assert result.value == "alice"

    @pytest.mark.asyncio
    async def test_end_then_lookup(self, session_store: SessionStore):
        token = (await session_store.start_session("alice")).unwrap()

        assert (await session_store.end_session(token)).ok
        assert (await session_store.lookup_username(token)).error is StoreError.NOT_FOUND

    @pytest.mark.asyncio
    async def test_end_is_idempotent(self, session_store: SessionStore):
        token = (await session_store.start_session("alice")).unwrap()

        assert (await session_store.end_session(token)).ok
        assert (await session_store.end_session(token)).ok
        assert (await session_store.end_session("never-issued")).ok
        assert (await session_store.end_session(None)).ok

    @pytest.mark.asyncio
    async def test_tokens_unique_per_session(self, session_store: SessionStore):
        tokens = await asyncio.gather(*(session_store.start_session("alice") for _ in range(5)))
        values = [r.unwrap() for r in tokens]

        assert len(set(values)) == 5
        for token in values:
            assert (await session_store.lookup_username(token)).value == "alice"

    @pytest.mark.asyncio
    async def test_ending_one_session_keeps_others(self, session_store: SessionStore):
        first = (await session_store.start_session("alice")).unwrap()
        second = (await session_store.start_session("alice")).unwrap()

        await session_store.end_session(first)

        assert (await session_store.lookup_username(second)).value == "alice"

    @pytest.mark.asyncio
    async def test_unknown_token(self, session_store: SessionStore):
        result = await session_store.lookup_username("does-not-exist")

        assert result.error is StoreError.NOT_FOUND

    @pytest.mark.asyncio
    async def test_empty_token_skips_storage(self, broken_factory):
        # A query against the broken factory would report STORAGE_ERROR
        store = SessionStore(broken_factory)

        assert (await store.lookup_username(None)).error is StoreError.NOT_FOUND
        assert (await store.lookup_username("")).error is StoreError.NOT_FOUND

    @pytest.mark.asyncio
    async def test_token_collision_regenerates(self, session_store: SessionStore, session_factory):
        first = (await session_store.start_session("alice")).unwrap()
        fresh = "f" * 43

        with patch(
            "blogcore.kernel.stores.session_store.generate_session_token",
            side_effect=[first, fresh],
        ):
            result = await session_store.start_session("bob")

        assert result.value == fresh
        assert (await session_store.lookup_username(first)).value == "alice"
        assert (await session_store.lookup_username(fresh)).value == "bob"

    @pytest.mark.asyncio
    async def test_storage_failure(self, broken_factory):
        store = SessionStore(broken_factory)

        assert (await store.start_session("alice")).error is StoreError.STORAGE_ERROR
        assert (await store.lookup_username("tok")).error is StoreError.STORAGE_ERROR
        assert (await store.end_session("tok")).error is StoreError.STORAGE_ERROR


class TestSessionExpiry:
    """Opt-in TTL behaviour."""

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, session_store: SessionStore, session_factory):
        token = (await session_store.start_session("alice")).unwrap()
        await _age_session(session_factory, token, timedelta(days=365))

        assert (await session_store.lookup_username(token)).value == "alice"
        assert (await session_store.purge_expired()).value == 0

    @pytest.mark.asyncio
    async def test_expired_session_not_found(self, session_factory):
        store = SessionStore(session_factory, ttl=timedelta(minutes=30))
        old = (await store.start_session("alice")).unwrap()
        young = (await store.start_session("bob")).unwrap()
        await _age_session(session_factory, old, timedelta(minutes=31))

        assert (await store.lookup_username(old)).error is StoreError.NOT_FOUND
        assert (await store.lookup_username(young)).value == "bob"

    @pytest.mark.asyncio
    async def test_purge_expired(self, session_factory):
        store = SessionStore(session_factory, ttl=timedelta(minutes=30))
        old = (await store.start_session("alice")).unwrap()
        young = (await store.start_session("bob")).unwrap()
        await _age_session(session_factory, old, timedelta(hours=2))

        assert (await store.purge_expired()).value == 1

        async with session_factory() as session:
            remaining = await session.scalar(select(func.count()).select_from(LoginSession))
        assert remaining == 1
        assert (await store.lookup_username(young)).value == "bob"

    @pytest.mark.asyncio
    async def test_lookup_and_purge_agree_at_boundary(self, session_factory):
        ttl = timedelta(minutes=30)
        store = SessionStore(session_factory, ttl=ttl)
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        at_limit = (await store.start_session("alice")).unwrap()
        past_limit = (await store.start_session("bob")).unwrap()
        await _set_created_at(session_factory, at_limit, now - ttl)
        await _set_created_at(session_factory, past_limit, now - ttl - timedelta(microseconds=1))

        with patch("blogcore.kernel.stores.session_store.utcnow", return_value=now):
            assert (await store.lookup_username(at_limit)).value == "alice"
            assert (await store.lookup_username(past_limit)).error is StoreError.NOT_FOUND
            assert (await store.purge_expired()).value == 1
            assert (await store.lookup_username(at_limit)).value == "alice"
