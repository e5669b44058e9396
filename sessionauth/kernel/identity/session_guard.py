"""
Request-time validation of access tokens and their bound sessions.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from sessionauth.kernel.identity.exceptions import TokenError, UnauthenticatedError
from sessionauth.kernel.identity.stores import SessionStore, UserStore
from sessionauth.kernel.identity.tokens import AccessTokenClaims, TokenIssuer
from sessionauth.kernel.models.user import User
from sessionauth.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity handed to protected handlers."""

    user: User
    session_id: Optional[uuid.UUID]
    claims: AccessTokenClaims

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def login(self) -> str:
        return self.user.login


class SessionGuard:
    """
    Checks an access token and the session it is bound to.

    A signature-valid, unexpired access token is still rejected once its
    session row is gone, so logout and rotation revoke it immediately.
    """

    def __init__(self, tokens: TokenIssuer, sessions: SessionStore, users: UserStore):
        self.tokens = tokens
        self.sessions = sessions
        self.users = users

    async def validate(self, access_token: Optional[str]) -> AuthContext:
        """
        Validate an access token.

        Raises:
            UnauthenticatedError: On any token, user or session failure
        """
        if not access_token:
            raise UnauthenticatedError()

        try:
            claims = self.tokens.verify_access(access_token)
        except TokenError as exc:
            logger.debug("Access token rejected: %s", exc)
            raise UnauthenticatedError() from exc

        user = await self.users.find_by_id(claims.user_id)
        if user is None:
            logger.debug("Access token for unknown user", extra={"user_id": str(claims.user_id)})
            raise UnauthenticatedError()

        if claims.session_id is not None:
            session = await self.sessions.find_by_id(claims.session_id)
            if session is None or self.sessions.is_expired(session, self.tokens.now()):
                logger.debug(
                    "Access token bound to dead session",
                    extra={"session_id": str(claims.session_id)},
                )
                raise UnauthenticatedError()
            if session.user_id != user.id:
                raise UnauthenticatedError()

        return AuthContext(user=user, session_id=claims.session_id, claims=claims)
