"""
Identity Core - Authentication and session management.
"""

from sessionauth.kernel.identity.password import PasswordHasher
from sessionauth.kernel.identity.tokens import (
    AccessTokenClaims,
    RefreshTokenClaims,
    TokenClaims,
    TokenIssuer,
)
from sessionauth.kernel.identity.stores import (
    SessionStore,
    SqlAlchemySessionStore,
    SqlAlchemyUserStore,
    UserStore,
)
from sessionauth.kernel.identity.session_guard import AuthContext, SessionGuard
from sessionauth.kernel.identity.auth_orchestrator import AuthOrchestrator, IssuedTokens

__all__ = [
    "PasswordHasher",
    "TokenIssuer",
    "TokenClaims",
    "AccessTokenClaims",
    "RefreshTokenClaims",
    "SessionStore",
    "UserStore",
    "SqlAlchemySessionStore",
    "SqlAlchemyUserStore",
    "SessionGuard",
    "AuthContext",
    "AuthOrchestrator",
    "IssuedTokens",
]
