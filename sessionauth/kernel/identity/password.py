"""
Password hashing utilities using argon2id.
"""

from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from sessionauth.config import Settings
from sessionauth.kernel.identity.exceptions import FatalError


class PasswordHasher:
    """
    Password hashing service.

    argon2id is memory-hard; the random salt is generated per call and
    embedded in the encoded hash together with the cost parameters.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        # Verified against when a login is unknown so the response takes
        # as long as a real password check.
        self.dummy_hash = self.hash("timing-equalization-dummy")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, password: str) -> str:
        """
        Hash a password.

        Args:
            password: Plain text password

        Returns:
            Encoded argon2id hash string

        Raises:
            FatalError: If the hashing primitive fails
        """
        try:
            return self._hasher.hash(password)
        except HashingError as exc:
            raise FatalError("Password hashing failed") from exc

    def verify(self, hashed_password: str, plain_password: str) -> bool:
        """
        Verify a password against its hash.

        Mismatches and malformed hashes both return False.
        """
        try:
            return self._hasher.verify(hashed_password, plain_password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """True if the hash was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(hashed_password)
        except InvalidHashError:
            return True
