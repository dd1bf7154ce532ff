"""
Property trace (sale history) service.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List, Mapping, Optional, Sequence
import uuid
import logging

from realestate.mappers import to_trace_dto, trace_values
from realestate.models import PropertyTrace
from realestate.repositories import PropertyRepository, TraceRepository
from realestate.repositories.filters import TraceFilters
from realestate.schemas.common import Page
from realestate.schemas.trace import TraceCreate, TraceDTO, TraceUpdate
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, entity_key
from realestate.services.listing import PaginatedListService
from realestate.services.patch import TracePatchReconciler
from realestate.utils.exceptions import NotFoundError
from realestate.utils.validators import TraceValidator

logger = logging.getLogger(__name__)


class TraceService:
    """Traces are part of the property detail view, so writes invalidate it."""

    def __init__(self, db_session: AsyncSession, cache: ResultCache):
        self.db = db_session
        self.cache = cache
        self.trace_repo = TraceRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.validator = TraceValidator()
        self.listing = PaginatedListService(self.trace_repo, cache, ns.TRACE, self._map_page)
        self.patcher = TracePatchReconciler(self.trace_repo, self.validator, cache)

    async def _map_page(self, rows: Sequence[PropertyTrace]) -> List[TraceDTO]:
        return [to_trace_dto(row) for row in rows]

    async def _require_property(self, property_id: uuid.UUID) -> None:
        if not await self.property_repo.exists(property_id):
            raise NotFoundError("Property", str(property_id))

    def _invalidate(self, trace: PropertyTrace, *property_ids: uuid.UUID) -> None:
        keys = [entity_key(ns.TRACE, trace.id), entity_key(ns.PROPERTY, trace.id_property)]
        keys.extend(entity_key(ns.PROPERTY, pid) for pid in property_ids)
        self.cache.invalidate(*keys)

    async def list(
        self,
        filters: TraceFilters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Page:
        return await self.listing.list(filters, page=page, limit=limit, force_refresh=force_refresh)

    async def get(self, trace_id: uuid.UUID) -> TraceDTO:
        key = entity_key(ns.TRACE, trace_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        trace = await self.trace_repo.get_by_id(trace_id)
        if trace is None:
            raise NotFoundError("PropertyTrace", str(trace_id))

        dto = to_trace_dto(trace)
        self.cache.set(key, dto)
        return dto

    async def create(self, trace_data: TraceCreate) -> TraceDTO:
        values = trace_values(trace_data)
        self.validator.ensure_valid(values)
        await self._require_property(values["id_property"])

        trace = await self.trace_repo.create(values)
        self._invalidate(trace)
        logger.info(f"Trace {trace.id} created for property {trace.id_property}")
        return to_trace_dto(trace)

    async def replace(self, trace_id: uuid.UUID, trace_data: TraceUpdate) -> TraceDTO:
        values = trace_values(trace_data)
        self.validator.ensure_valid(values)

        current = await self.trace_repo.get_by_id(trace_id)
        if current is None:
            raise NotFoundError("PropertyTrace", str(trace_id))
        previous_property = current.id_property
        await self._require_property(values["id_property"])

        trace = await self.trace_repo.replace(trace_id, values)
        if trace is None:
            raise NotFoundError("PropertyTrace", str(trace_id))

        self._invalidate(trace, previous_property)
        return to_trace_dto(trace)

    async def patch(self, trace_id: uuid.UUID, field_map: Mapping[str, Any], requester=None) -> TraceDTO:
        return to_trace_dto(await self.patcher.patch(trace_id, field_map, requester))

    async def delete(self, trace_id: uuid.UUID) -> None:
        trace = await self.trace_repo.get_by_id(trace_id)
        if trace is None:
            raise NotFoundError("PropertyTrace", str(trace_id))

        await self.trace_repo.delete(trace_id)
        self._invalidate(trace)
        logger.info(f"Trace deleted: {trace_id}")
