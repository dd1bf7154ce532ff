"""
FastAPI dependency injection utilities for services and authentication.
Provides per-request services bound to the request's session and the shared cache.
"""

from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from realestate.database import get_db
from realestate.models import User
from realestate.services.auth import AuthService
from realestate.services.cache import ResultCache, get_result_cache
from realestate.services.image import ImageService
from realestate.services.owner import OwnerService
from realestate.services.password import PasswordService
from realestate.services.property import PropertyService
from realestate.services.trace import TraceService
from realestate.services.user import UserService
from realestate.utils.exceptions import InsufficientPermissionsError, UnauthorizedError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> PropertyService:
    return PropertyService(db, cache)


async def get_owner_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> OwnerService:
    return OwnerService(db, cache)


async def get_image_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> ImageService:
    return ImageService(db, cache)


async def get_trace_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> TraceService:
    return TraceService(db, cache)


async def get_user_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> UserService:
    return UserService(db, cache)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> AuthService:
    return AuthService(db, cache)


async def get_password_service(
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> PasswordService:
    return PasswordService(db, cache)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer access token.

    Raises:
        UnauthorizedError: If no token is provided
        InvalidTokenError: If the token is invalid
        TokenExpiredError: If the token has expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


def require_roles(*roles: str) -> Callable:
    """
    Create a dependency that admits only users holding one of the roles.

    Args:
        roles: Accepted roles

    Returns:
        Dependency function returning the current user
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise InsufficientPermissionsError(f"access resources requiring role: {', '.join(roles)}")
        return current_user

    return role_checker


get_admin_user = require_roles("admin")
get_editor_user = require_roles("editor", "admin")


def ensure_self_or_admin(current_user: User, user_id: uuid.UUID) -> None:
    """
    Raises:
        InsufficientPermissionsError: If a non-admin targets another account
    """
    if not current_user.is_admin and current_user.id != user_id:
        raise InsufficientPermissionsError("access another user's account")
