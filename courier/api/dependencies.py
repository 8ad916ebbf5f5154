"""FastAPI dependencies for services and authentication."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from courier.database import get_pool
from courier.errors import CredentialError
from courier.models.auth import Identity
from courier.services.auth_service import AuthService
from courier.services.message_service import MessageService
from courier.services.messaging_service import MessagingService
from courier.services.token_service import TokenService
from courier.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_user_service() -> UserService:
    return UserService(await get_pool())


async def get_auth_service(
    users: UserService = Depends(get_user_service),
) -> AuthService:
    return AuthService(users)


async def get_messaging_service(
    users: UserService = Depends(get_user_service),
) -> MessagingService:
    return MessagingService(users, MessageService(users.pool, users))


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """Extract the caller's identity from a JWT Bearer token.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = TokenService().validate_access_token(credentials.credentials)
    except CredentialError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired access token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Identity(username=payload["username"])
