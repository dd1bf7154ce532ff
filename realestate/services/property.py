"""
Property service: listing, lookup and CRUD with image/trace handling.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Mapping, Optional, Sequence
import uuid
import logging

from realestate.config import settings
from realestate.mappers import property_values, to_property_dto, trace_values
from realestate.models import Property
from realestate.repositories import ImageRepository, OwnerRepository, PropertyRepository, TraceRepository
from realestate.repositories.filters import PropertyFilters
from realestate.schemas.common import Page
from realestate.schemas.property import PropertyCreate, PropertyDTO, PropertyUpdate
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, entity_key
from realestate.services.listing import PaginatedListService
from realestate.services.patch import PropertyPatchReconciler
from realestate.utils.exceptions import NotFoundError, ValidationError
from realestate.utils.validators import ImageValidator, PropertyValidator, TraceValidator

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property business logic. Property views carry the first image of the
    property; single-property views also carry its traces.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        cache: ResultCache,
        cascade_traces: Optional[bool] = None,
    ):
        self.db = db_session
        self.cache = cache
        self.cascade_traces = settings.cascade_delete_traces if cascade_traces is None else cascade_traces

        self.property_repo = PropertyRepository(db_session)
        self.owner_repo = OwnerRepository(db_session)
        self.image_repo = ImageRepository(db_session)
        self.trace_repo = TraceRepository(db_session)

        self.validator = PropertyValidator()
        self.listing = PaginatedListService(self.property_repo, cache, ns.PROPERTY, self._map_page)
        self.patcher = PropertyPatchReconciler(self.property_repo, self.validator, cache)

    async def _map_page(self, rows: Sequence[Property]) -> List[PropertyDTO]:
        images = await self.image_repo.first_for_properties(row.id for row in rows)
        return [to_property_dto(row, images.get(row.id)) for row in rows]

    async def _to_detail(self, prop: Property) -> PropertyDTO:
        image = await self.image_repo.first_for_property(prop.id)
        traces = await self.trace_repo.for_property(prop.id)
        return to_property_dto(prop, image, traces)

    async def _require(self, property_id: uuid.UUID) -> Property:
        prop = await self.property_repo.get_by_id(property_id)
        if prop is None:
            raise NotFoundError("Property", str(property_id))
        return prop

    async def _require_owner(self, values: Dict[str, Any]) -> None:
        if not await self.owner_repo.exists(values["id_owner"]):
            raise NotFoundError("Owner", str(values["id_owner"]))

    async def list(
        self,
        filters: PropertyFilters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Page:
        return await self.listing.list(filters, page=page, limit=limit, force_refresh=force_refresh)

    async def get(self, property_id: uuid.UUID) -> PropertyDTO:
        """
        Get a property with its image and traces.

        Raises:
            NotFoundError: If the property does not exist
        """
        key = entity_key(ns.PROPERTY, property_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        dto = await self._to_detail(await self._require(property_id))
        self.cache.set(key, dto)
        return dto

    async def create(self, property_data: PropertyCreate) -> PropertyDTO:
        """
        Create a property, plus its embedded image and traces when given.
        Everything is validated first and then stored in one transaction.

        Raises:
            ValidationError: If the property, image or any trace is invalid
            NotFoundError: If the owner does not exist
        """
        values = property_values(property_data)
        errors = self.validator.validate(values)

        # Embedded children reference a property id that does not exist yet
        placeholder = uuid.uuid4()
        image = None
        if property_data.image is not None:
            image = {"id_property": placeholder, **property_data.image.model_dump(include={"file", "enabled"})}
            errors.extend(f"image: {e}" for e in ImageValidator().validate(image))

        traces = []
        for index, trace in enumerate(property_data.traces or []):
            trace_map = trace_values(trace, placeholder)
            errors.extend(f"traces[{index}]: {e}" for e in TraceValidator().validate(trace_map))
            traces.append(trace_map)

        if errors:
            raise ValidationError(errors)

        await self._require_owner(values)
        prop = await self.property_repo.create_with_children(values, image, traces)

        logger.info(f"Property created: {prop.id} ({prop.name})")
        return await self._to_detail(prop)

    async def replace(self, property_id: uuid.UUID, property_data: PropertyUpdate) -> PropertyDTO:
        """Overwrite every editable field of a property (PUT)."""
        await self._require(property_id)

        values = property_values(property_data)
        self.validator.ensure_valid(values)
        await self._require_owner(values)

        prop = await self.property_repo.replace(property_id, values)
        if prop is None:
            raise NotFoundError("Property", str(property_id))

        self.cache.invalidate(entity_key(ns.PROPERTY, property_id))
        logger.info(f"Property replaced: {property_id}")
        return await self._to_detail(prop)

    async def patch(self, property_id: uuid.UUID, field_map: Mapping[str, Any], requester=None) -> PropertyDTO:
        prop = await self.patcher.patch(property_id, field_map, requester)
        return await self._to_detail(prop)

    async def delete(self, property_id: uuid.UUID) -> None:
        """
        Delete a property and its images; traces go too when trace cascade
        is enabled.

        Raises:
            NotFoundError: If the property does not exist
        """
        await self._require(property_id)

        images = await self.image_repo.for_property(property_id)
        await self.image_repo.delete_for_property(property_id)
        traces = []
        if self.cascade_traces:
            traces = await self.trace_repo.for_property(property_id)
            await self.trace_repo.delete_for_property(property_id)
        await self.property_repo.delete(property_id)

        keys = [entity_key(ns.PROPERTY, property_id)]
        keys.extend(entity_key(ns.IMAGE, image.id) for image in images)
        keys.extend(entity_key(ns.TRACE, trace.id) for trace in traces)
        self.cache.invalidate(*keys)
        logger.info(f"Property deleted: {property_id} (traces cascaded: {self.cascade_traces})")
