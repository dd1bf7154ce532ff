"""
Property image service.

A property surfaces a single image, so creation is an upsert keyed by the
property: when the property already has an image, that image is updated.
Every image write invalidates the cached view of the owning property.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List, Mapping, Optional, Sequence
import uuid
import logging

from realestate.mappers import image_values, to_image_dto
from realestate.models import PropertyImage
from realestate.repositories import ImageRepository, PropertyRepository
from realestate.repositories.filters import ImageFilters
from realestate.schemas.common import Page
from realestate.schemas.image import ImageCreate, ImageDTO, ImageUpdate
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, entity_key
from realestate.services.listing import PaginatedListService
from realestate.services.patch import ImagePatchReconciler
from realestate.utils.exceptions import NotFoundError
from realestate.utils.validators import ImageValidator

logger = logging.getLogger(__name__)


class ImageService:
    def __init__(self, db_session: AsyncSession, cache: ResultCache):
        self.db = db_session
        self.cache = cache
        self.image_repo = ImageRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.validator = ImageValidator()
        self.listing = PaginatedListService(self.image_repo, cache, ns.IMAGE, self._map_page)
        self.patcher = ImagePatchReconciler(self.image_repo, self.validator, cache)

    async def _map_page(self, rows: Sequence[PropertyImage]) -> List[ImageDTO]:
        return [to_image_dto(row) for row in rows]

    async def _require_property(self, property_id: uuid.UUID) -> None:
        if not await self.property_repo.exists(property_id):
            raise NotFoundError("Property", str(property_id))

    def _invalidate(self, image: PropertyImage, *property_ids: uuid.UUID) -> None:
        keys = [entity_key(ns.IMAGE, image.id), entity_key(ns.PROPERTY, image.id_property)]
        keys.extend(entity_key(ns.PROPERTY, pid) for pid in property_ids)
        self.cache.invalidate(*keys)

    async def list(
        self,
        filters: ImageFilters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Page:
        return await self.listing.list(filters, page=page, limit=limit, force_refresh=force_refresh)

    async def get(self, image_id: uuid.UUID) -> ImageDTO:
        key = entity_key(ns.IMAGE, image_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        image = await self.image_repo.get_by_id(image_id)
        if image is None:
            raise NotFoundError("PropertyImage", str(image_id))

        dto = to_image_dto(image)
        self.cache.set(key, dto)
        return dto

    async def get_by_property(self, property_id: uuid.UUID) -> ImageDTO:
        """Return the image shown for a property."""
        image = await self.image_repo.first_for_property(property_id)
        if image is None:
            raise NotFoundError("PropertyImage for property", str(property_id))
        return to_image_dto(image)

    async def create(self, image_data: ImageCreate) -> ImageDTO:
        """
        Create the image of a property, or update the one it already has.

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the property does not exist
        """
        values = image_values(image_data)
        self.validator.ensure_valid(values)
        await self._require_property(values["id_property"])

        existing = await self.image_repo.first_for_property(values["id_property"])
        if existing is not None:
            await self.image_repo.update(existing.id, {"file": values["file"], "enabled": values["enabled"]})
            image = await self.image_repo.get_by_id(existing.id)
            logger.info(f"Image {image.id} updated for property {image.id_property}")
        else:
            image = await self.image_repo.create(values)
            logger.info(f"Image {image.id} created for property {image.id_property}")

        self._invalidate(image)
        return to_image_dto(image)

    async def replace(self, image_id: uuid.UUID, image_data: ImageUpdate) -> ImageDTO:
        values = image_values(image_data)
        self.validator.ensure_valid(values)

        current = await self.image_repo.get_by_id(image_id)
        if current is None:
            raise NotFoundError("PropertyImage", str(image_id))
        previous_property = current.id_property
        await self._require_property(values["id_property"])

        image = await self.image_repo.replace(image_id, values)
        if image is None:
            raise NotFoundError("PropertyImage", str(image_id))

        self._invalidate(image, previous_property)
        return to_image_dto(image)

    async def patch(self, image_id: uuid.UUID, field_map: Mapping[str, Any], requester=None) -> ImageDTO:
        return to_image_dto(await self.patcher.patch(image_id, field_map, requester))

    async def delete(self, image_id: uuid.UUID) -> None:
        image = await self.image_repo.get_by_id(image_id)
        if image is None:
            raise NotFoundError("PropertyImage", str(image_id))

        await self.image_repo.delete(image_id)
        self._invalidate(image)
        logger.info(f"Image deleted: {image_id}")
