"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.

Settings are frozen: they are read once at startup and passed into
constructors, never looked up from the environment inside business logic.
"""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any, List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production-minimum-32-characters-long"
MIN_SECRET_LENGTH = 32

# "900" (seconds) or a unit suffix: "500ms", "30s", "15m", "12h", "7d", "2w".
_DURATION_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d|w)?\s*$")
_DURATION_UNITS = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: Any) -> Any:
    """
    Read a TTL given as seconds or as a number with a unit suffix.

    Anything else (timedelta, ISO 8601 "PT15M") is left for pydantic.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match:
            amount, unit = match.groups()
            return timedelta(**{_DURATION_UNITS[unit or "s"]: int(amount)})
    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./sessionauth.db"

    # Tokens
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_token_ttl: timedelta = timedelta(minutes=15)
    jwt_refresh_token_ttl: timedelta = timedelta(days=7)

    # Refresh cookie
    cookie_name: str = "refreshToken"
    cookies_domain: Optional[str] = None

    # Password hashing (argon2id cost parameters)
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    argon2_parallelism: int = 4

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    cors_origins: List[str] = ["http://localhost:3000"]

    # API Settings
    api_prefix: str = ""
    project_name: str = "Session Auth Service"
    version: str = "1.0.0"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        # Tokens are only ever signed and verified with HS256.
        if v != "HS256":
            raise ValueError("Only HS256 is supported for jwt_algorithm")
        return v

    @field_validator("jwt_access_token_ttl", "jwt_refresh_token_ttl", mode="before")
    @classmethod
    def parse_ttl(cls, v: Any) -> Any:
        return parse_duration(v)

    @field_validator("jwt_access_token_ttl", "jwt_refresh_token_ttl")
    @classmethod
    def validate_ttl(cls, v: timedelta) -> timedelta:
        if v.total_seconds() <= 0:
            raise ValueError("Token TTL must be positive")
        return v

    @model_validator(mode="after")
    def validate_secret(self) -> "Settings":
        if self.is_development:
            return self
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set outside development")
        if len(self.jwt_secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
