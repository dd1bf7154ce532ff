"""
Owner service.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List, Mapping, Optional, Sequence
import uuid
import logging

from realestate.mappers import owner_values, to_owner_dto
from realestate.models import Owner
from realestate.repositories import OwnerRepository
from realestate.repositories.filters import OwnerFilters
from realestate.schemas.common import Page
from realestate.schemas.owner import OwnerCreate, OwnerDTO, OwnerUpdate
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, entity_key
from realestate.services.listing import PaginatedListService
from realestate.services.patch import OwnerPatchReconciler
from realestate.utils.exceptions import NotFoundError
from realestate.utils.validators import OwnerValidator

logger = logging.getLogger(__name__)


class OwnerService:
    def __init__(self, db_session: AsyncSession, cache: ResultCache):
        self.db = db_session
        self.cache = cache
        self.owner_repo = OwnerRepository(db_session)
        self.validator = OwnerValidator()
        self.listing = PaginatedListService(self.owner_repo, cache, ns.OWNER, self._map_page)
        self.patcher = OwnerPatchReconciler(self.owner_repo, self.validator, cache)

    async def _map_page(self, rows: Sequence[Owner]) -> List[OwnerDTO]:
        return [to_owner_dto(row) for row in rows]

    async def list(
        self,
        filters: OwnerFilters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Page:
        return await self.listing.list(filters, page=page, limit=limit, force_refresh=force_refresh)

    async def get(self, owner_id: uuid.UUID) -> OwnerDTO:
        key = entity_key(ns.OWNER, owner_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        owner = await self.owner_repo.get_by_id(owner_id)
        if owner is None:
            raise NotFoundError("Owner", str(owner_id))

        dto = to_owner_dto(owner)
        self.cache.set(key, dto)
        return dto

    async def create(self, owner_data: OwnerCreate) -> OwnerDTO:
        values = owner_values(owner_data)
        self.validator.ensure_valid(values)

        owner = await self.owner_repo.create(values)
        logger.info(f"Owner created: {owner.id}")
        return to_owner_dto(owner)

    async def replace(self, owner_id: uuid.UUID, owner_data: OwnerUpdate) -> OwnerDTO:
        values = owner_values(owner_data)
        self.validator.ensure_valid(values)

        owner = await self.owner_repo.replace(owner_id, values)
        if owner is None:
            raise NotFoundError("Owner", str(owner_id))

        self.cache.invalidate(entity_key(ns.OWNER, owner_id))
        return to_owner_dto(owner)

    async def patch(self, owner_id: uuid.UUID, field_map: Mapping[str, Any], requester=None) -> OwnerDTO:
        return to_owner_dto(await self.patcher.patch(owner_id, field_map, requester))

    async def delete(self, owner_id: uuid.UUID) -> None:
        if not await self.owner_repo.delete(owner_id):
            raise NotFoundError("Owner", str(owner_id))

        self.cache.invalidate(entity_key(ns.OWNER, owner_id))
        logger.info(f"Owner deleted: {owner_id}")
