"""
Owner repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from realestate.models import Owner
from realestate.repositories.base import BaseRepository


class OwnerRepository(BaseRepository[Owner]):
    def __init__(self, db: AsyncSession):
        super().__init__(Owner, db)
