"""
Authentication use cases: register, login, refresh, logout, validate.

Every call re-reads users and sessions from the stores; the orchestrator
holds no state between requests beyond its collaborators.
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sessionauth.kernel.identity.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    TokenError,
    UnauthorizedError,
    ValidationError,
)
from sessionauth.kernel.identity.password import PasswordHasher
from sessionauth.kernel.identity.session_guard import AuthContext, SessionGuard
from sessionauth.kernel.identity.stores import SessionStore, UserStore
from sessionauth.kernel.identity.tokens import TokenIssuer
from sessionauth.kernel.models.user import User
from sessionauth.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedTokens:
    """
    Result of a successful register/login/refresh.

    Only access_token belongs in a response body; refresh_token travels in
    the HTTP-only cookie and expires with the session.
    """

    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    session_id: uuid.UUID
    user_id: uuid.UUID


class AuthOrchestrator:
    """
    Service for session-backed authentication.

    Coordinates the password hasher, token issuer and stores.
    """

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
    ):
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.tokens = tokens
        self.guard = SessionGuard(tokens=tokens, sessions=sessions, users=users)

    async def register(self, login: str, password: str) -> IssuedTokens:
        """
        Register a new user and open their first session.

        Raises:
            ValidationError: If login is empty
            ConflictError: If login already exists
        """
        login = (login or "").strip()
        if not login:
            raise ValidationError("Login is required")

        if await self.users.find_by_login(login) is not None:
            raise ConflictError()

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        # The unique index still guards against a concurrent registration.
        user = await self.users.create(login=login, password_hash=password_hash)
        logger.info("User registered", extra={"user_id": str(user.id)})

        return await self._issue(user)

    async def login(self, login: str, password: str) -> IssuedTokens:
        """
        Authenticate credentials and open a new session.

        Unknown login and wrong password raise the same NotFoundError, and
        both run one argon2 verification so timing does not differ either.
        """
        user = await self.users.find_by_login((login or "").strip())
        if user is None:
            await asyncio.to_thread(self.hasher.verify, self.hasher.dummy_hash, password)
            raise NotFoundError()

        if not await asyncio.to_thread(self.hasher.verify, user.password_hash, password):
            raise NotFoundError()

        if self.hasher.needs_rehash(user.password_hash):
            new_hash = await asyncio.to_thread(self.hasher.hash, password)
            await self.users.update_password_hash(user.id, new_hash)
            logger.info("Password hash upgraded", extra={"user_id": str(user.id)})

        logger.info("User logged in", extra={"user_id": str(user.id)})
        return await self._issue(user)

    async def refresh(self, refresh_token: Optional[str]) -> IssuedTokens:
        """
        Rotate a refresh token: consume its session and open a new one.

        Refresh tokens are single use. Whatever goes wrong, the caller only
        ever sees UnauthorizedError.
        """
        try:
            return await self._rotate(refresh_token)
        except UnauthorizedError:
            raise
        except (AuthError, TokenError) as exc:
            logger.info("Refresh rejected: %s", type(exc).__name__)
            raise UnauthorizedError() from exc
        except Exception as exc:
            logger.warning("Refresh failed unexpectedly", exc_info=True)
            raise UnauthorizedError() from exc

    async def logout(self, refresh_token: Optional[str]) -> None:
        """
        Best-effort revocation of the refresh token's session.

        Never raises: the caller clears the cookie regardless.
        """
        if not refresh_token:
            return
        try:
            claims = self.tokens.verify_refresh(refresh_token)
            if claims.session_id is not None:
                await self.sessions.delete(claims.session_id)
                logger.info("Session closed", extra={"session_id": str(claims.session_id)})
        except Exception as exc:
            logger.debug("Logout ignored error: %s", type(exc).__name__)

    async def validate(self, access_token: Optional[str]) -> AuthContext:
        """Resolve the identity behind an access token and its live session."""
        return await self.guard.validate(access_token)

    async def _rotate(self, refresh_token: Optional[str]) -> IssuedTokens:
        if not refresh_token:
            raise UnauthorizedError()

        claims = self.tokens.verify_refresh(refresh_token)
        if claims.session_id is None:
            raise UnauthorizedError()

        session = await self.sessions.find_by_id(claims.session_id)
        if session is None:
            raise UnauthorizedError()

        if self.sessions.is_expired(session, self.tokens.now()):
            await self.sessions.delete(session.id)
            raise UnauthorizedError()

        # A structurally valid token that is not the one stored for this
        # session has been replayed or substituted.
        if not self.tokens.token_matches(refresh_token, session.refresh_token_hash):
            raise UnauthorizedError()
        if session.user_id != claims.user_id:
            raise UnauthorizedError()

        user = await self.users.find_by_id(session.user_id)
        if user is None:
            raise UnauthorizedError()

        # Delete before issuing: a crash in between revokes rather than
        # duplicating. Losing the delete means a concurrent refresh won.
        if not await self.sessions.delete(session.id):
            logger.info("Refresh lost rotation race", extra={"session_id": str(session.id)})
            raise UnauthorizedError()

        issued = await self._issue(user)
        logger.info(
            "Session rotated",
            extra={"old_session_id": str(session.id), "session_id": str(issued.session_id)},
        )
        return issued

    async def _issue(self, user: User) -> IssuedTokens:
        session_id = uuid.uuid4()
        access_token = self.tokens.issue_access(user.id, session_id)
        refresh_token = self.tokens.issue_refresh(user.id, session_id)
        expires_at = self.tokens.now() + self.tokens.refresh_token_ttl

        await self.sessions.create(
            user_id=user.id,
            refresh_token_hash=self.tokens.hash_token(refresh_token),
            expires_at=expires_at,
            session_id=session_id,
        )

        return IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            refresh_expires_at=expires_at,
            session_id=session_id,
            user_id=user.id,
        )
