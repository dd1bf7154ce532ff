"""
Property image API endpoints.
Editing needs the editor or admin role; deleting needs admin.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Any, Dict, List, Optional
from uuid import UUID

from realestate.models import User
from realestate.repositories.filters import ImageFilters
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.image import ImageCreate, ImageDTO, ImageUpdate
from realestate.services.image import ImageService
from realestate.utils.dependencies import get_admin_user, get_current_user, get_editor_user, get_image_service

router = APIRouter(prefix="/propertyimage", tags=["Images"])


@router.get("", response_model=ApiResponse[List[ImageDTO]], summary="List images")
async def list_images(
    id_property: Optional[UUID] = Query(None, alias="idProperty"),
    enabled: Optional[bool] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    refresh: bool = Query(False),
    image_service: ImageService = Depends(get_image_service),
):
    filters = ImageFilters(id_property=id_property, enabled=enabled)
    result = await image_service.list(filters, page=page, limit=limit, force_refresh=refresh)
    return envelope(result.data, meta=result.meta)


@router.get("/property/{property_id}", response_model=ApiResponse[ImageDTO], summary="Get a property's image")
async def get_property_image(
    property_id: UUID = Path(...),
    image_service: ImageService = Depends(get_image_service),
):
    return envelope(await image_service.get_by_property(property_id))


@router.get("/{image_id}", response_model=ApiResponse[ImageDTO], summary="Get image by id")
async def get_image(
    image_id: UUID = Path(...),
    image_service: ImageService = Depends(get_image_service),
):
    return envelope(await image_service.get(image_id))


@router.post(
    "",
    response_model=ApiResponse[ImageDTO],
    status_code=status.HTTP_201_CREATED,
    summary="Create or replace a property's image"
)
async def create_image(
    image_data: ImageCreate,
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    dto = await image_service.create(image_data)
    return envelope(dto, message="Image saved", status_code=status.HTTP_201_CREATED)


@router.put("/{image_id}", response_model=ApiResponse[ImageDTO], summary="Replace image")
async def replace_image(
    image_data: ImageUpdate,
    image_id: UUID = Path(...),
    current_user: User = Depends(get_editor_user),
    image_service: ImageService = Depends(get_image_service),
):
    return envelope(await image_service.replace(image_id, image_data), message="Image updated")


@router.patch("/{image_id}", response_model=ApiResponse[ImageDTO], summary="Partially update image")
async def patch_image(
    field_map: Dict[str, Any] = Body(...),
    image_id: UUID = Path(...),
    current_user: User = Depends(get_editor_user),
    image_service: ImageService = Depends(get_image_service),
):
    return envelope(await image_service.patch(image_id, field_map, current_user), message="Image updated")


@router.delete("/{image_id}", response_model=ApiResponse[None], summary="Delete image")
async def delete_image(
    image_id: UUID = Path(...),
    current_user: User = Depends(get_admin_user),
    image_service: ImageService = Depends(get_image_service),
):
    await image_service.delete(image_id)
    return envelope(message="Image deleted")
