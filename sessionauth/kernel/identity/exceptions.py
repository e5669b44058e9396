"""
Error taxonomy for the identity core.

AuthError subclasses carry the HTTP status and a client-safe message and are
rendered by the application's exception handler. TokenError subclasses are
internal: callers translate them to a generic 401 before anything reaches a
client, so "expired" and "forged" are never distinguishable from outside.
"""

from http import HTTPStatus
from typing import Optional


class AuthError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "auth_error"
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Malformed input the caller can fix."""

    status_code = HTTPStatus.BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid input"


class ConflictError(AuthError):
    """Login already taken."""

    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "A user with this login already exists"


class NotFoundError(AuthError):
    """Credential failure. One message for unknown login and wrong password."""

    status_code = HTTPStatus.NOT_FOUND
    code = "invalid_credentials"
    default_message = "Invalid login or password"


class UnauthorizedError(AuthError):
    """Missing, expired, forged, rotated or revoked refresh token."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized"


class UnauthenticatedError(AuthError):
    """Access token or its bound session is not valid."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Not authenticated"


class FatalError(AuthError):
    """Persistence or hashing primitive unavailable."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_error"
    default_message = "Internal server error"


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    """Bad signature, wrong algorithm, malformed payload or wrong token type."""


class TokenExpiredError(TokenError):
    """Token is past its exp claim."""
