"""
Property trace API endpoints.
"""

from fastapi import APIRouter, Body, Depends, Path, Query, status
from typing import Any, Dict, List, Optional
from uuid import UUID

from realestate.models import User
from realestate.repositories.filters import TraceFilters
from realestate.schemas.common import ApiResponse, envelope
from realestate.schemas.trace import TraceCreate, TraceDTO, TraceUpdate
from realestate.services.trace import TraceService
from realestate.utils.dependencies import get_admin_user, get_current_user, get_trace_service

router = APIRouter(prefix="/propertytrace", tags=["Traces"])


@router.get("", response_model=ApiResponse[List[TraceDTO]], summary="List traces")
async def list_traces(
    id_property: Optional[UUID] = Query(None, alias="idProperty"),
    name: Optional[str] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    refresh: bool = Query(False),
    trace_service: TraceService = Depends(get_trace_service),
):
    filters = TraceFilters(id_property=id_property, name=name)
    result = await trace_service.list(filters, page=page, limit=limit, force_refresh=refresh)
    return envelope(result.data, meta=result.meta)


@router.get("/{trace_id}", response_model=ApiResponse[TraceDTO], summary="Get trace by id")
async def get_trace(
    trace_id: UUID = Path(...),
    trace_service: TraceService = Depends(get_trace_service),
):
    return envelope(await trace_service.get(trace_id))


@router.post("", response_model=ApiResponse[TraceDTO], status_code=status.HTTP_201_CREATED, summary="Create trace")
async def create_trace(
    trace_data: TraceCreate,
    current_user: User = Depends(get_current_user),
    trace_service: TraceService = Depends(get_trace_service),
):
    dto = await trace_service.create(trace_data)
    return envelope(dto, message="Trace created", status_code=status.HTTP_201_CREATED)


@router.put("/{trace_id}", response_model=ApiResponse[TraceDTO], summary="Replace trace")
async def replace_trace(
    trace_data: TraceUpdate,
    trace_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    trace_service: TraceService = Depends(get_trace_service),
):
    return envelope(await trace_service.replace(trace_id, trace_data), message="Trace updated")


@router.patch("/{trace_id}", response_model=ApiResponse[TraceDTO], summary="Partially update trace")
async def patch_trace(
    field_map: Dict[str, Any] = Body(...),
    trace_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    trace_service: TraceService = Depends(get_trace_service),
):
    return envelope(await trace_service.patch(trace_id, field_map, current_user), message="Trace updated")


@router.delete("/{trace_id}", response_model=ApiResponse[None], summary="Delete trace")
async def delete_trace(
    trace_id: UUID = Path(...),
    current_user: User = Depends(get_admin_user),
    trace_service: TraceService = Depends(get_trace_service),
):
    await trace_service.delete(trace_id)
    return envelope(message="Trace deleted")
