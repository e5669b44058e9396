"""
Kernel Data Models

SQLAlchemy models owned by the persistence layer: users and their sessions.
"""

from sessionauth.kernel.models.base import Base, UtcDateTime
from sessionauth.kernel.models.user import Session, User

__all__ = [
    "Base",
    "UtcDateTime",
    "User",
    "Session",
]
