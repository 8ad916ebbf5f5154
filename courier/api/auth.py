"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status

from courier.api.dependencies import get_auth_service
from courier.models.auth import LoginRequest, RegisterRequest, TokenResponse
from courier.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Register a new user and log them in.

    Raises:
        ConflictError (409): If the username is already taken
    """
    token = await auth_service.register(
        username=request.username,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )
    return TokenResponse(token=token)


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Login with username and password.

    Raises:
        CredentialError (401): If the username or password is wrong
    """
    token = await auth_service.login(request.username, request.password)
    return TokenResponse(token=token)
