"""Password hashing and verification with bcrypt."""

import asyncio
from functools import lru_cache
from typing import Optional

import bcrypt
import structlog

from courier.config import get_settings
from courier.errors import CredentialError, ValidationError

logger = structlog.get_logger(__name__)

# bcrypt only looks at the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


@lru_cache
def _dummy_hash(work_factor: int) -> bytes:
    """Fixed hash used to spend equal effort on unknown usernames."""
    return bcrypt.hashpw(b"courier-dummy-password", bcrypt.gensalt(rounds=work_factor))


class CredentialService:
    """The only component that handles plain-text passwords."""

    def __init__(self, work_factor: Optional[int] = None):
        self.work_factor = work_factor or get_settings().bcrypt_work_factor
        # Built up front so the first unknown-user login costs the same as later ones
        self._dummy_hash = _dummy_hash(self.work_factor)

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string (salted, so repeated calls differ)

        Raises:
            ValidationError: If the password is empty or longer than 72 bytes
        """
        encoded = password.encode("utf-8")
        if not encoded:
            raise ValidationError("Password cannot be empty", field="password")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes", field="password"
            )
        salt = bcrypt.gensalt(rounds=self.work_factor)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: Optional[str]) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            password: Plain-text password to check
            password_hash: Stored bcrypt hash

        Returns:
            True if the password matches, False otherwise

        Raises:
            CredentialError: If the stored hash is absent or malformed
        """
        if not password_hash:
            raise CredentialError(reason="missing_hash")

        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Can never match a stored hash, but must cost one bcrypt check
            self.dummy_verify(password)
            return False

        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            logger.error("stored_password_hash_malformed")
            raise CredentialError(reason="malformed_hash")

    def dummy_verify(self, password: str) -> None:
        """Spend one verification's worth of effort and discard the result."""
        encoded = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        bcrypt.checkpw(encoded, self._dummy_hash)

    async def hash_password_async(self, password: str) -> str:
        """``hash_password`` in a worker thread."""
        return await asyncio.to_thread(self.hash_password, password)

    async def verify_password_async(
        self, password: str, password_hash: Optional[str]
    ) -> bool:
        """``verify_password`` in a worker thread."""
        return await asyncio.to_thread(self.verify_password, password, password_hash)

    async def dummy_verify_async(self, password: str) -> None:
        await asyncio.to_thread(self.dummy_verify, password)
