"""Authentication API routes."""

from fastapi import APIRouter, Depends, status

from server.auth import get_current_user
from server.schemas.common import error_responses
from server.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
)
from server.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"], responses=error_responses(400, 401))


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    Parameters:
        - username: Unique username (must not already exist)
        - password: User password (will be hashed before storage)

    Returns:
        - api_key: Generated API Key with 'cv_' prefix
        - user_id: UUID of created user

    Raises:
        - 400: Username already exists or blank credentials
    """
    auth_service = AuthService()
    api_key, user_id = auth_service.register_user(request.username, request.password)

    return RegisterResponse(api_key=api_key, user_id=user_id)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """
    Authenticate user and generate new API Key.

    Returns:
        - api_key: New API Key (replaces previous key)

    Raises:
        - 401: Invalid credentials
    """
    auth_service = AuthService()
    api_key = auth_service.login_user(request.username, request.password)

    return LoginResponse(api_key=api_key)


@router.post("/logout", response_model=LogoutResponse)
async def logout(current_user: str = Depends(get_current_user)):
    """
    Revoke the caller's API Key. Later requests with it fail with 401.
    """
    AuthService().logout_user(current_user)
    return LogoutResponse(logged_out=True)
