"""
Persistence interfaces for users and sessions.

The orchestrator and guard only see the narrow Protocols below; the
SQLAlchemy implementations are the single concrete backend.
"""

import functools
import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sessionauth.kernel.identity.exceptions import ConflictError, FatalError
from sessionauth.kernel.models.user import Session, User
from sessionauth.logging_config import get_logger

logger = get_logger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionStore(Protocol):
    async def create(
        self,
        user_id: uuid.UUID,
        refresh_token_hash: str,
        expires_at: datetime,
        session_id: Optional[uuid.UUID] = None,
    ) -> uuid.UUID:
        ...

    async def find_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        ...

    async def delete(self, session_id: uuid.UUID) -> bool:
        ...

    def is_expired(self, session: Session, now: datetime) -> bool:
        ...


class UserStore(Protocol):
    async def create(self, login: str, password_hash: str) -> User:
        ...

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        ...

    async def find_by_login(self, login: str) -> Optional[User]:
        ...

    async def update_password_hash(self, user_id: uuid.UUID, password_hash: str) -> None:
        ...


def _store_call(func):
    """Turn driver/database failures into FatalError."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Store operation %s failed", func.__qualname__, exc_info=True)
            raise FatalError("Persistence layer unavailable") from exc

    return wrapper


class SqlAlchemySessionStore:
    """
    Session rows in the `sessions` table.

    Every mutation commits immediately: a delete must be visible to other
    requests (possibly in other processes) before this one continues.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @_store_call
    async def create(
        self,
        user_id: uuid.UUID,
        refresh_token_hash: str,
        expires_at: datetime,
        session_id: Optional[uuid.UUID] = None,
    ) -> uuid.UUID:
        record = Session(
            id=session_id or uuid.uuid4(),
            user_id=user_id,
            refresh_token_hash=refresh_token_hash,
            expires_at=expires_at,
        )
        self.session.add(record)
        await self.session.commit()
        return record.id

    @_store_call
    async def find_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        # Always reload: another request may have changed the row since this
        # ORM session last saw it.
        query = (
            select(Session)
            .where(Session.id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @_store_call
    async def delete(self, session_id: uuid.UUID) -> bool:
        """
        Delete a session row. Missing rows are not an error.

        Returns:
            True if this call removed the row
        """
        result = await self.session.execute(
            delete(Session)
            .where(Session.id == session_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount > 0

    def is_expired(self, session: Session, now: datetime) -> bool:
        return as_utc(session.expires_at) < now


class SqlAlchemyUserStore:
    """User rows in the `users` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, login: str, password_hash: str) -> User:
        """
        Insert a user.

        Raises:
            ConflictError: If the login is already taken
        """
        user = User(login=login, password_hash=password_hash)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise FatalError("Persistence layer unavailable") from exc
        return user

    @_store_call
    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @_store_call
    async def find_by_login(self, login: str) -> Optional[User]:
        query = select(User).where(User.login == login)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @_store_call
    async def update_password_hash(self, user_id: uuid.UUID, password_hash: str) -> None:
        await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
