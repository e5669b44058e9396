"""
FastAPI dependencies for authentication and database sessions.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from sessionauth.config import Settings
from sessionauth.database import get_db
from sessionauth.kernel.identity.auth_orchestrator import AuthOrchestrator
from sessionauth.kernel.identity.session_guard import AuthContext
from sessionauth.kernel.identity.stores import SqlAlchemySessionStore, SqlAlchemyUserStore


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_app_settings(request: Request) -> Settings:
    """Settings loaded once at startup."""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_orchestrator(request: Request, db: DbSession) -> AuthOrchestrator:
    """Per-request orchestrator over request-scoped stores and app-wide primitives."""
    return AuthOrchestrator(
        users=SqlAlchemyUserStore(db),
        sessions=SqlAlchemySessionStore(db),
        hasher=request.app.state.password_hasher,
        tokens=request.app.state.token_issuer,
    )


Orchestrator = Annotated[AuthOrchestrator, Depends(get_orchestrator)]


async def require_session(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    orchestrator: Orchestrator,
) -> AuthContext:
    """
    Guard for protected routes.

    Validates the Bearer access token and its session and hands the
    resolved identity to the handler. Raises UnauthenticatedError (401).
    """
    token = credentials.credentials if credentials else None
    return await orchestrator.validate(token)


CurrentSession = Annotated[AuthContext, Depends(require_session)]


def get_refresh_token(request: Request, settings: AppSettings) -> Optional[str]:
    """Raw refresh token from its cookie, if any."""
    return request.cookies.get(settings.cookie_name) or None


RefreshToken = Annotated[Optional[str], Depends(get_refresh_token)]
