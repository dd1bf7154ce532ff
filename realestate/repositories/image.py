"""
Property image repository with per-property lookups used for enrichment.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Iterable, List, Optional
import uuid
import logging

from realestate.models import PropertyImage
from realestate.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[PropertyImage]):
    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def first_for_property(self, property_id: uuid.UUID) -> Optional[PropertyImage]:
        """Return the first image stored for a property, if any."""
        return await self.find_one(PropertyImage.id_property == property_id)

    async def for_property(self, property_id: uuid.UUID) -> List[PropertyImage]:
        return await self.find(PropertyImage.id_property == property_id)

    async def first_for_properties(
        self, property_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, PropertyImage]:
        """
        Fetch the first image of each property in one query.

        Args:
            property_ids: Properties to look up

        Returns:
            Mapping of property id to its first image; properties without
            images are absent
        """
        ids = list(dict.fromkeys(property_ids))
        if not ids:
            return {}

        images = await self.find(PropertyImage.id_property.in_(ids))
        first: Dict[uuid.UUID, PropertyImage] = {}
        for image in images:
            # find() returns insertion order, so the first seen wins
            first.setdefault(image.id_property, image)

        logger.debug(f"Loaded images for {len(first)} of {len(ids)} properties")
        return first

    async def delete_for_property(self, property_id: uuid.UUID) -> int:
        return await self.delete_where(PropertyImage.id_property == property_id)
