"""
Property repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Iterable, Optional
import logging

from realestate.models import Property, PropertyImage, PropertyTrace
from realestate.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_with_children(
        self,
        values: Dict[str, Any],
        image: Optional[Dict[str, Any]] = None,
        traces: Iterable[Dict[str, Any]] = (),
    ) -> Property:
        """
        Insert a property together with its image and traces in one
        transaction. A failing child insert leaves nothing stored.

        Args:
            values: Property field values
            image: Optional image field values
            traces: Trace field values

        Returns:
            Created property, refreshed with server-generated fields
        """
        try:
            prop = Property(**values)
            self.db.add(prop)
            # Flush assigns the id the children point at
            await self.db.flush()

            if image is not None:
                self.db.add(PropertyImage(**{**image, "id_property": prop.id}))
            for trace in traces:
                self.db.add(PropertyTrace(**{**trace, "id_property": prop.id}))

            await self.db.commit()
            await self.db.refresh(prop)
            logger.debug(f"Created Property with id: {prop.id} and its children")
            return prop
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create Property with children: {e}")
            raise
