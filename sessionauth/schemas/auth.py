"""
Authentication schemas.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Email address, or a Russian phone number starting with +7 or 8.
LOGIN_PATTERN = re.compile(r"^([\w\-.]+@([\w-]+\.)+[\w-]{2,4}|(\+7|8)[0-9]{10,11})$")
PASSWORD_SPECIALS = "@$!%*?&"
PASSWORD_PATTERN = re.compile(r"^[A-Za-z\d@$!%*?&]+$")


def _validate_login(v: str) -> str:
    v = v.strip()
    if not LOGIN_PATTERN.match(v):
        raise ValueError("Login must be an email address or a phone number (+7 or 8)")
    return v


class RegisterRequest(BaseModel):
    """User registration request."""

    login: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("login")
    @classmethod
    def validate_login(cls, v: str) -> str:
        return _validate_login(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not PASSWORD_PATTERN.match(v):
            raise ValueError(
                f"Password may only contain letters, digits and {PASSWORD_SPECIALS}"
            )
        if not any(c.isupper() for c in v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        if not any(c in PASSWORD_SPECIALS for c in v):
            raise ValueError(
                f"Password must contain at least one special character ({PASSWORD_SPECIALS})"
            )
        return v


class LoginRequest(BaseModel):
    """User login request."""

    login: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("login")
    @classmethod
    def validate_login(cls, v: str) -> str:
        return _validate_login(v)


class AccessTokenResponse(BaseModel):
    """Access token returned in the body. The refresh token is cookie-only."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")


class UserInfoResponse(BaseModel):
    """Identity of the authenticated caller."""

    login: str
