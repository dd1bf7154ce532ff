"""
User API endpoints.
Administrators manage every account; other users only their own.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Any, Dict, List, Optional
from uuid import UUID

from realestate.mappers import to_user_dto
from realestate.models import User
from realestate.repositories.filters import UserFilters
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.user import UserCreate, UserDTO, UserUpdate
from realestate.services.user import UserService
from realestate.utils.dependencies import (
    ensure_self_or_admin,
    get_admin_user,
    get_current_user,
    get_user_service,
)
from realestate.utils.exceptions import InsufficientPermissionsError

router = APIRouter(prefix="/user", tags=["Users"])


@router.get("", response_model=ApiResponse[List[UserDTO]], summary="List users")
async def list_users(
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    refresh: bool = Query(False),
    current_user: User = Depends(get_admin_user),
    user_service: UserService = Depends(get_user_service),
):
    filters = UserFilters(name=name, email=email, role=role)
    result = await user_service.list(filters, page=page, limit=limit, force_refresh=refresh)
    return envelope(result.data, meta=result.meta)


@router.get("/email/{email}", response_model=ApiResponse[UserDTO], summary="Get user by email")
async def get_user_by_email(
    email: str = Path(...),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    if not current_user.is_admin and current_user.email != email.strip().lower():
        raise InsufficientPermissionsError("access another user's account")
    return envelope(await user_service.get_by_email(email))


@router.get("/{user_id}", response_model=ApiResponse[UserDTO], summary="Get user by id")
async def get_user(
    user_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    ensure_self_or_admin(current_user, user_id)
    return envelope(await user_service.get(user_id))


@router.post("", response_model=ApiResponse[UserDTO], status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(
    user_data: UserCreate,
    current_user: User = Depends(get_admin_user),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.create(user_data)
    return envelope(to_user_dto(user), message="User created", status_code=status.HTTP_201_CREATED)


@router.put("/{user_id}", response_model=ApiResponse[UserDTO], summary="Replace user")
async def replace_user(
    user_data: UserUpdate,
    user_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    ensure_self_or_admin(current_user, user_id)
    dto = await user_service.replace(user_id, user_data, current_user)
    return envelope(dto, message="User updated")


@router.patch("/{user_id}", response_model=ApiResponse[UserDTO], summary="Partially update user")
async def patch_user(
    field_map: Dict[str, Any] = Body(...),
    user_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    ensure_self_or_admin(current_user, user_id)
    dto = await user_service.patch(user_id, field_map, current_user)
    return envelope(dto, message="User updated")


@router.delete("/{user_id}", response_model=ApiResponse[None], summary="Delete user")
async def delete_user(
    user_id: UUID = Path(...),
    current_user: User = Depends(get_admin_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete(user_id)
    return envelope(message="User deleted")
