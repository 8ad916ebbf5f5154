"""User directory: registration, authentication and profile lookup."""

from datetime import datetime, timezone
from typing import Iterable, Optional

import asyncpg
import structlog

from courier.errors import ConflictError, CredentialError, NotFoundError
from courier.models.user import User, UserSummary
from courier.services.credential_service import CredentialService

logger = structlog.get_logger(__name__)

PROFILE_COLUMNS = "username, first_name, last_name, phone, join_at, last_login_at"


def _user_from_row(row) -> User:
    return User(
        username=row["username"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row["phone"],
        join_at=row["join_at"],
        last_login_at=row["last_login_at"],
    )


class UserService:
    """Service for user records, keyed by username."""

    def __init__(self, pool: asyncpg.Pool, credentials: Optional[CredentialService] = None):
        self.pool = pool
        self.credentials = credentials or CredentialService()

    async def register(
        self,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str,
    ) -> User:
        """Create a new user with a hashed password.

        The hash is computed before touching the database, so a user row is
        never written without one.

        Args:
            username: Unique username
            password: Plain-text password (will be hashed)
            first_name: Given name
            last_name: Family name
            phone: Contact phone number

        Returns:
            Created User (without the password hash)

        Raises:
            ConflictError: If the username is already taken
        """
        password_hash = await self.credentials.hash_password_async(password)
        now = datetime.now(timezone.utc)

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO users (username, password, first_name, last_name, phone, join_at, last_login_at)
                VALUES ($1, $2, $3, $4, $5, $6, $6)
                ON CONFLICT (username) DO NOTHING
                RETURNING {PROFILE_COLUMNS}
                """,
                username,
                password_hash,
                first_name,
                last_name,
                phone,
                now,
            )

        if row is None:
            raise ConflictError(f"Username '{username}' is already taken")

        logger.info("user_registered", username=username)
        return _user_from_row(row)

    async def authenticate(self, username: str, password: str) -> User:
        """Verify credentials and record the login.

        Unknown usernames and wrong passwords raise the same CredentialError,
        and both paths pay for one bcrypt verification.

        Returns:
            The authenticated User with its updated last_login_at

        Raises:
            CredentialError: On any authentication failure
        """
        async with self.pool.acquire() as conn:
            password_hash = await conn.fetchval(
                "SELECT password FROM users WHERE username = $1",
                username,
            )

        if password_hash is None:
            await self.credentials.dummy_verify_async(password)
            logger.info("login_failed", reason="unknown_user")
            raise CredentialError()

        if not await self.credentials.verify_password_async(password, password_hash):
            logger.info("login_failed", reason="wrong_password")
            raise CredentialError()

        user = await self.touch_login(username)
        logger.info("user_logged_in", username=username)
        return user

    async def touch_login(self, username: str) -> User:
        """Set last_login_at to now.

        Raises:
            NotFoundError: If the username is unknown
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE users
                SET last_login_at = $1
                WHERE username = $2
                RETURNING {PROFILE_COLUMNS}
                """,
                datetime.now(timezone.utc),
                username,
            )

        if row is None:
            raise NotFoundError("User", username)
        return _user_from_row(row)

    async def get(self, username: str) -> User:
        """Get a user's profile.

        Raises:
            NotFoundError: If the username is unknown
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {PROFILE_COLUMNS} FROM users WHERE username = $1",
                username,
            )

        if row is None:
            raise NotFoundError("User", username)
        return _user_from_row(row)

    async def list_all(self) -> list[UserSummary]:
        """Return all users ordered by username."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT username, first_name, last_name
                FROM users
                ORDER BY username ASC
                """
            )

        return [
            UserSummary(
                username=row["username"],
                first_name=row["first_name"],
                last_name=row["last_name"],
            )
            for row in rows
        ]

    async def existing(self, usernames: Iterable[str]) -> set[str]:
        """Return the subset of usernames that exist."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT username FROM users WHERE username = ANY($1::text[])",
                list(set(usernames)),
            )
        return {row["username"] for row in rows}

    async def ensure_exists(self, username: str) -> None:
        """Raise NotFoundError unless the username exists."""
        if username not in await self.existing([username]):
            raise NotFoundError("User", username)
