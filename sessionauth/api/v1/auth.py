"""
Authentication endpoints.

The access token is returned in the body. The refresh token only ever
travels in an HTTP-only cookie.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from sessionauth.api.deps import AppSettings, CurrentSession, Orchestrator, RefreshToken
from sessionauth.config import Settings
from sessionauth.kernel.identity.auth_orchestrator import IssuedTokens
from sessionauth.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RegisterRequest,
    UserInfoResponse,
)
from sessionauth.schemas.common import SuccessResponse

router = APIRouter()

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def set_refresh_cookie(
    response: Response,
    settings: Settings,
    value: str,
    expires: datetime,
) -> None:
    """Write (or, with an empty value and epoch expiry, clear) the refresh cookie."""
    response.set_cookie(
        settings.cookie_name,
        value=value,
        expires=expires,
        domain=settings.cookies_domain,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    set_refresh_cookie(response, settings, "", EPOCH)


def _token_response(
    response: Response,
    settings: Settings,
    issued: IssuedTokens,
) -> AccessTokenResponse:
    set_refresh_cookie(response, settings, issued.refresh_token, issued.refresh_expires_at)
    return AccessTokenResponse(access_token=issued.access_token)


@router.post(
    "/signup",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    data: RegisterRequest,
    response: Response,
    orchestrator: Orchestrator,
    settings: AppSettings,
):
    """
    Register a new user account.

    Returns an access token and sets the refresh cookie.
    """
    issued = await orchestrator.register(login=data.login, password=data.password)
    return _token_response(response, settings, issued)


@router.post("/signin", response_model=AccessTokenResponse)
async def signin(
    data: LoginRequest,
    response: Response,
    orchestrator: Orchestrator,
    settings: AppSettings,
):
    """Authenticate user and open a new session."""
    issued = await orchestrator.login(login=data.login, password=data.password)
    return _token_response(response, settings, issued)


@router.post("/signin/refresh", response_model=AccessTokenResponse)
async def refresh(
    response: Response,
    refresh_token: RefreshToken,
    orchestrator: Orchestrator,
    settings: AppSettings,
):
    """
    Exchange the refresh cookie for a new token pair.

    The presented refresh token is consumed and can never be used again.
    """
    issued = await orchestrator.refresh(refresh_token)
    return _token_response(response, settings, issued)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    refresh_token: RefreshToken,
    orchestrator: Orchestrator,
    settings: AppSettings,
):
    """Revoke the current session (best effort) and clear the refresh cookie."""
    await orchestrator.logout(refresh_token)
    clear_refresh_cookie(response, settings)
    return SuccessResponse(message="Logged out")


@router.get("/info", response_model=UserInfoResponse)
async def info(auth: CurrentSession):
    """Get the current user's login."""
    return UserInfoResponse(login=auth.login)
