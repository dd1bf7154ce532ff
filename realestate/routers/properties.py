"""
Property API endpoints: filtered listing, lookup and CRUD.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from realestate.middleware import get_request_logger
from realestate.models import User
from realestate.repositories.filters import PropertyFilters
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.property import PropertyCreate, PropertyDTO, PropertyUpdate
from realestate.services.property import PropertyService
from realestate.utils.dependencies import get_admin_user, get_current_user, get_property_service

router = APIRouter(prefix="/property", tags=["Properties"])


@router.get(
    "",
    response_model=ApiResponse[List[PropertyDTO]],
    summary="List properties",
    description="Paginated property listing filtered by name, address, price range and owner"
)
async def list_properties(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    address: Optional[str] = Query(None, description="Case-insensitive substring of the address"),
    min_price: Optional[int] = Query(None, alias="minPrice", description="Inclusive lower price bound"),
    max_price: Optional[int] = Query(None, alias="maxPrice", description="Inclusive upper price bound"),
    id_owner: Optional[UUID] = Query(None, alias="idOwner", description="Owner id"),
    page: int = Query(1, description="Page number (starts from 1)"),
    limit: Optional[int] = Query(None, description="Page size (1-100, default 6)"),
    refresh: bool = Query(False, description="Bypass the cached page"),
    property_service: PropertyService = Depends(get_property_service),
    log: logging.LoggerAdapter = Depends(get_request_logger),
):
    filters = PropertyFilters(
        name=name,
        address=address,
        min_price=min_price,
        max_price=max_price,
        id_owner=id_owner,
    )
    result = await property_service.list(filters, page=page, limit=limit, force_refresh=refresh)
    log.info(f"Properties listed: {len(result.data)} of {result.meta.total}")
    return envelope(result.data, meta=result.meta)


@router.get("/{property_id}", response_model=ApiResponse[PropertyDTO], summary="Get property by id")
async def get_property(
    property_id: UUID = Path(..., description="Property id"),
    property_service: PropertyService = Depends(get_property_service),
):
    return envelope(await property_service.get(property_id))


@router.post(
    "",
    response_model=ApiResponse[PropertyDTO],
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a property, optionally with its image and sale traces"
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    log: logging.LoggerAdapter = Depends(get_request_logger),
):
    dto = await property_service.create(property_data)
    log.info(f"Property {dto.id} created by {current_user.email}")
    return envelope(dto, message="Property created", status_code=status.HTTP_201_CREATED)


@router.put("/{property_id}", response_model=ApiResponse[PropertyDTO], summary="Replace property")
async def replace_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property id"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    return envelope(await property_service.replace(property_id, property_data), message="Property updated")


@router.patch("/{property_id}", response_model=ApiResponse[PropertyDTO], summary="Partially update property")
async def patch_property(
    field_map: Dict[str, Any] = Body(..., description="Fields to change"),
    property_id: UUID = Path(..., description="Property id"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
):
    dto = await property_service.patch(property_id, field_map, current_user)
    return envelope(dto, message="Property updated")


@router.delete("/{property_id}", response_model=ApiResponse[None], summary="Delete property")
async def delete_property(
    property_id: UUID = Path(..., description="Property id"),
    current_user: User = Depends(get_admin_user),
    property_service: PropertyService = Depends(get_property_service),
    log: logging.LoggerAdapter = Depends(get_request_logger),
):
    await property_service.delete(property_id)
    log.info(f"Property {property_id} deleted by {current_user.email}")
    return envelope(message="Property deleted")
