"""
Authentication and token endpoints: login, registration, refresh and validation.
"""

from fastapi import APIRouter, Depends, status

from realestate.config import settings
from realestate.mappers import to_user_dto
from realestate.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    TokenResponse,
    TokenValidateRequest,
    TokenValidation,
)
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.user import UserCreate, UserDTO
from realestate.services.auth import AuthService
from realestate.utils.dependencies import get_auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])
token_router = APIRouter(prefix="/token", tags=["Authentication"])


def _token_response(user, access_token: str, refresh_token: str) -> TokenResponse:
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=to_user_dto(user),
    )


@router.post("/login", response_model=ApiResponse[TokenResponse], summary="Log in")
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate with email and password.

    Returns an access token (short-lived) and a refresh token.
    """
    user, access_token, refresh_token = await auth_service.login(credentials.email, credentials.password)
    return envelope(_token_response(user, access_token, refresh_token), message="Login successful")


@router.post(
    "/register",
    response_model=ApiResponse[UserDTO],
    status_code=status.HTTP_201_CREATED,
    summary="Register"
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Self-service sign-up. Any requested role is ignored."""
    user = await auth_service.register(user_data)
    return envelope(to_user_dto(user), message="User registered", status_code=status.HTTP_201_CREATED)


@token_router.post("/refresh", response_model=ApiResponse[TokenResponse], summary="Refresh tokens")
async def refresh_tokens(
    request: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token for a new access/refresh pair."""
    user, access_token, refresh_token = await auth_service.refresh(request.refresh_token)
    return envelope(_token_response(user, access_token, refresh_token), message="Tokens refreshed")


@token_router.post("/validate", response_model=ApiResponse[TokenValidation], summary="Validate token")
async def validate_token(
    request: TokenValidateRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    return envelope(auth_service.describe_token(request.token), message="Token is valid")
