"""
JWT token management for authentication.

Access and refresh tokens are both HS256 JWTs carrying the user id (sub) and
the session id (sid). They differ only in TTL and in the "type" claim, which
verification checks so one kind can never be used in place of the other.
"""

import hashlib
import hmac
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from sessionauth.config import Settings
from sessionauth.kernel.identity.exceptions import InvalidTokenError, TokenExpiredError

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenClaims(BaseModel):
    """Decoded JWT payload."""

    user_id: uuid.UUID
    session_id: Optional[uuid.UUID] = None
    expires_at: datetime
    issued_at: datetime
    token_id: str
    token_type: str


class AccessTokenClaims(TokenClaims):
    """JWT access token payload."""

    token_type: str = ACCESS_TOKEN_TYPE


class RefreshTokenClaims(TokenClaims):
    """JWT refresh token payload."""

    token_type: str = REFRESH_TOKEN_TYPE


_CLAIMS_BY_TYPE = {
    ACCESS_TOKEN_TYPE: AccessTokenClaims,
    REFRESH_TOKEN_TYPE: RefreshTokenClaims,
}


class TokenIssuer:
    """
    JWT token creation and verification.

    Handles access tokens (short-lived) and refresh tokens (long-lived).
    """

    def __init__(
        self,
        secret_key: str,
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
        algorithm: str = ALGORITHM,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.jwt_secret,
            access_token_ttl=settings.jwt_access_token_ttl,
            refresh_token_ttl=settings.jwt_refresh_token_ttl,
            algorithm=settings.jwt_algorithm,
        )

    def now(self) -> datetime:
        return self._clock()

    def _issue(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID,
        token_type: str,
        ttl: timedelta,
    ) -> str:
        now = self.now()
        payload = {
            "sub": str(user_id),
            "sid": str(session_id),
            "exp": now + ttl,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": token_type,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def issue_access(self, user_id: uuid.UUID, session_id: uuid.UUID) -> str:
        """Create a short-lived access token bound to a session."""
        return self._issue(user_id, session_id, ACCESS_TOKEN_TYPE, self.access_token_ttl)

    def issue_refresh(self, user_id: uuid.UUID, session_id: uuid.UUID) -> str:
        """Create a long-lived refresh token for a session."""
        return self._issue(user_id, session_id, REFRESH_TOKEN_TYPE, self.refresh_token_ttl)

    def verify(self, token: str, token_type: Optional[str] = None) -> TokenClaims:
        """
        Verify and decode a token.

        Args:
            token: Encoded JWT
            token_type: If given, the "type" claim must match it

        Returns:
            AccessTokenClaims or RefreshTokenClaims

        Raises:
            TokenExpiredError: If the token is past its exp claim
            InvalidTokenError: On any other verification failure
        """
        if not token:
            raise InvalidTokenError("Empty token")
        try:
            # Expiry is judged against our own clock below, not wall time.
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "require_exp": True},
            )
        except JWTError as exc:
            raise InvalidTokenError("Token verification failed") from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidTokenError("Malformed token claims")
        if exp <= self.now().timestamp():
            raise TokenExpiredError("Token has expired")

        claims_type = payload.get("type")
        if token_type is not None and claims_type != token_type:
            raise InvalidTokenError("Unexpected token type")
        claims_cls = _CLAIMS_BY_TYPE.get(claims_type)
        if claims_cls is None:
            raise InvalidTokenError("Unknown token type")

        try:
            return claims_cls(
                user_id=uuid.UUID(payload["sub"]),
                session_id=uuid.UUID(payload["sid"]) if payload.get("sid") else None,
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                token_id=payload["jti"],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed token claims") from exc

    def verify_access(self, token: str) -> AccessTokenClaims:
        return self.verify(token, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> RefreshTokenClaims:
        return self.verify(token, REFRESH_TOKEN_TYPE)

    @staticmethod
    def hash_token(token: str) -> str:
        """
        Create a hash of a token for storage.

        Refresh tokens are long random-looking JWTs, so a fast digest is
        enough; only the digest is ever persisted.
        """
        return hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def token_matches(token: str, token_hash: str) -> bool:
        """Constant-time comparison of a token against a stored digest."""
        return hmac.compare_digest(TokenIssuer.hash_token(token), token_hash)
