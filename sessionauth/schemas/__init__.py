"""
Pydantic request/response schemas.
"""

from sessionauth.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RegisterRequest,
    UserInfoResponse,
)
from sessionauth.schemas.common import ErrorResponse, HealthResponse, SuccessResponse

__all__ = [
    "AccessTokenResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserInfoResponse",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
]
