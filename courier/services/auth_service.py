"""Registration and login: credentials in, signed token out."""

from typing import Optional

import structlog

from courier.services.token_service import TokenService
from courier.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Turns a successful registration or login into an identity token."""

    def __init__(self, users: UserService, tokens: Optional[TokenService] = None):
        self.users = users
        self.tokens = tokens or TokenService()

    async def register(
        self,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str,
    ) -> str:
        """Register a new user and log them in.

        Returns:
            Signed token for the new user

        Raises:
            ConflictError: If the username is already taken
        """
        user = await self.users.register(
            username=username,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
        )
        return self.tokens.create_access_token(user.username)

    async def login(self, username: str, password: str) -> str:
        """Authenticate and return a token.

        Raises:
            CredentialError: If the username or password is wrong (indistinguishable)
        """
        user = await self.users.authenticate(username, password)
        return self.tokens.create_access_token(user.username)
