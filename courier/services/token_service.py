"""Signed identity tokens (JWT)."""

import secrets
from datetime import datetime, timedelta, timezone

import jwt
import structlog

from courier.config import get_settings
from courier.errors import CredentialError

logger = structlog.get_logger(__name__)

JWT_ALGORITHM = "HS256"


class TokenService:
    """Mints and validates HS256 tokens carrying the username claim."""

    def __init__(self):
        self.settings = get_settings()

    def create_access_token(self, username: str) -> str:
        """Create a signed JWT access token.

        Args:
            username: Verified username placed in the 'sub' and 'username' claims

        Returns:
            Encoded JWT string. A random 'jti' makes every token unique.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "username": username,
            "iat": now,
            "jti": secrets.token_urlsafe(16),
        }
        expire_minutes = self.settings.access_token_expire_minutes
        if expire_minutes:
            payload["exp"] = now + timedelta(minutes=expire_minutes)

        token = jwt.encode(payload, self.settings.jwt_secret, algorithm=JWT_ALGORITHM)
        logger.debug(
            "access_token_created",
            username=username,
            expires_minutes=expire_minutes,
        )
        return token

    def validate_access_token(self, token: str) -> dict:
        """Decode and validate a JWT access token.

        Args:
            token: Encoded JWT string

        Returns:
            Decoded payload dict

        Raises:
            CredentialError: If the token is invalid, expired, or lacks a username
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[JWT_ALGORITHM],
            )
        except jwt.ExpiredSignatureError:
            raise CredentialError(reason="token_expired")
        except jwt.InvalidTokenError:
            raise CredentialError(reason="token_invalid")

        if not payload.get("username"):
            raise CredentialError(reason="token_missing_username")
        return payload
