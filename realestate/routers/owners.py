"""
Owner API endpoints.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Any, Dict, List, Optional
from uuid import UUID

from realestate.models import User
from realestate.repositories.filters import OwnerFilters
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.owner import OwnerCreate, OwnerDTO, OwnerUpdate
from realestate.services.owner import OwnerService
from realestate.utils.dependencies import get_admin_user, get_current_user, get_owner_service

router = APIRouter(prefix="/owner", tags=["Owners"])


@router.get("", response_model=ApiResponse[List[OwnerDTO]], summary="List owners")
async def list_owners(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    address: Optional[str] = Query(None, description="Case-insensitive substring of the address"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    refresh: bool = Query(False, description="Bypass the cached page"),
    owner_service: OwnerService = Depends(get_owner_service),
):
    result = await owner_service.list(OwnerFilters(name=name, address=address), page=page, limit=limit, force_refresh=refresh)
    return envelope(result.data, meta=result.meta)


@router.get("/{owner_id}", response_model=ApiResponse[OwnerDTO], summary="Get owner by id")
async def get_owner(
    owner_id: UUID = Path(...),
    owner_service: OwnerService = Depends(get_owner_service),
):
    return envelope(await owner_service.get(owner_id))


@router.post("", response_model=ApiResponse[OwnerDTO], status_code=status.HTTP_201_CREATED, summary="Create owner")
async def create_owner(
    owner_data: OwnerCreate,
    current_user: User = Depends(get_current_user),
    owner_service: OwnerService = Depends(get_owner_service),
):
    dto = await owner_service.create(owner_data)
    return envelope(dto, message="Owner created", status_code=status.HTTP_201_CREATED)


@router.put("/{owner_id}", response_model=ApiResponse[OwnerDTO], summary="Replace owner")
async def replace_owner(
    owner_data: OwnerUpdate,
    owner_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    owner_service: OwnerService = Depends(get_owner_service),
):
    return envelope(await owner_service.replace(owner_id, owner_data), message="Owner updated")


@router.patch("/{owner_id}", response_model=ApiResponse[OwnerDTO], summary="Partially update owner")
async def patch_owner(
    field_map: Dict[str, Any] = Body(...),
    owner_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    owner_service: OwnerService = Depends(get_owner_service),
):
    return envelope(await owner_service.patch(owner_id, field_map, current_user), message="Owner updated")


@router.delete("/{owner_id}", response_model=ApiResponse[None], summary="Delete owner")
async def delete_owner(
    owner_id: UUID = Path(...),
    current_user: User = Depends(get_admin_user),
    owner_service: OwnerService = Depends(get_owner_service),
):
    await owner_service.delete(owner_id)
    return envelope(message="Owner deleted")
