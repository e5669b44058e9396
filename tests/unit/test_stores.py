"""Unit tests for the SQLAlchemy user and session stores."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from sessionauth.kernel.identity.exceptions import ConflictError
from sessionauth.kernel.identity.stores import (
    SqlAlchemySessionStore,
    SqlAlchemyUserStore,
    as_utc,
)
from sessionauth.kernel.models.user import Session


@pytest.mark.asyncio
async def test_user_create_and_lookup(db_session):
    users = SqlAlchemyUserStore(db_session)

    user = await users.create(login="a@b.com", password_hash="hash")

    assert (await users.find_by_login("a@b.com")).id == user.id
    assert (await users.find_by_id(user.id)).login == "a@b.com"
    assert await users.find_by_login("missing@b.com") is None
    assert await users.find_by_id(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_user_duplicate_login_conflicts(session_maker):
    async with session_maker() as first:
        await SqlAlchemyUserStore(first).create(login="a@b.com", password_hash="hash")

    async with session_maker() as second:
        with pytest.raises(ConflictError):
            await SqlAlchemyUserStore(second).create(login="a@b.com", password_hash="other")


@pytest.mark.asyncio
async def test_session_create_find_delete(db_session):
    user = await SqlAlchemyUserStore(db_session).create(login="a@b.com", password_hash="hash")
    sessions = SqlAlchemySessionStore(db_session)
    expires_at = datetime.now(timezone.utc) + timedelta(days=7)

    session_id = await sessions.create(user.id, "digest", expires_at)
    found = await sessions.find_by_id(session_id)

    assert found is not None
    assert found.user_id == user.id
    assert found.refresh_token_hash == "digest"

    assert await sessions.delete(session_id) is True
    assert await sessions.find_by_id(session_id) is None


@pytest.mark.asyncio
async def test_session_create_uses_given_id(db_session):
    user = await SqlAlchemyUserStore(db_session).create(login="a@b.com", password_hash="hash")
    sessions = SqlAlchemySessionStore(db_session)
    wanted = uuid.uuid4()

    session_id = await sessions.create(
        user.id, "digest", datetime.now(timezone.utc), session_id=wanted
    )

    assert session_id == wanted


@pytest.mark.asyncio
async def test_session_delete_is_idempotent(db_session):
    sessions = SqlAlchemySessionStore(db_session)

    assert await sessions.delete(uuid.uuid4()) is False


@pytest.mark.asyncio
async def test_session_delete_visible_to_other_connections(session_maker):
    async with session_maker() as setup:
        user = await SqlAlchemyUserStore(setup).create(login="a@b.com", password_hash="hash")
        session_id = await SqlAlchemySessionStore(setup).create(
            user.id, "digest", datetime.now(timezone.utc) + timedelta(days=1)
        )

    async with session_maker() as deleter:
        assert await SqlAlchemySessionStore(deleter).delete(session_id) is True

    async with session_maker() as reader:
        assert await SqlAlchemySessionStore(reader).find_by_id(session_id) is None


def test_is_expired_handles_naive_and_aware_timestamps():
    sessions = SqlAlchemySessionStore(session=None)
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    past_naive = Session(expires_at=datetime(2026, 1, 1, 11, 0))
    future_aware = Session(expires_at=datetime(2026, 1, 1, 13, 0, tzinfo=timezone.utc))

    assert sessions.is_expired(past_naive, now) is True
    assert sessions.is_expired(future_aware, now) is False


def test_as_utc_leaves_aware_values_alone():
    aware = datetime(2026, 1, 1, tzinfo=timezone(timedelta(hours=3)))

    assert as_utc(aware) is aware
    assert as_utc(datetime(2026, 1, 1)).tzinfo is timezone.utc


@pytest.mark.asyncio
async def test_session_expiry_reads_back_as_utc(session_maker):
    moscow = timezone(timedelta(hours=3))
    expires_at = datetime(2030, 1, 1, 15, 0, tzinfo=moscow)
    async with session_maker() as db:
        user = await SqlAlchemyUserStore(db).create(login="a@b.com", password_hash="hash")
        session_id = await SqlAlchemySessionStore(db).create(user.id, "digest", expires_at)

    async with session_maker() as db:
        found = await SqlAlchemySessionStore(db).find_by_id(session_id)

    assert found.expires_at.tzinfo is not None
    assert found.expires_at.utcoffset() == timedelta(0)
    assert found.expires_at == expires_at
