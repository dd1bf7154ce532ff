"""
Property trace repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from realestate.models import PropertyTrace
from realestate.repositories.base import BaseRepository


class TraceRepository(BaseRepository[PropertyTrace]):
    def __init__(self, db: AsyncSession):
        super().__init__(PropertyTrace, db)

    async def for_property(self, property_id: uuid.UUID) -> List[PropertyTrace]:
        return await self.find(PropertyTrace.id_property == property_id)

    async def delete_for_property(self, property_id: uuid.UUID) -> int:
        return await self.delete_where(PropertyTrace.id_property == property_id)
