"""
User repository with email lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from realestate.models import User
from realestate.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: User's email address

        Returns:
            User if found, None otherwise
        """
        return await self.find_one(User.email == email.strip().lower())

    async def email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        """Check whether another user already uses the email."""
        predicate = User.email == email.strip().lower()
        if exclude_id is not None:
            predicate = predicate & (User.id != exclude_id)
        return await self.count(predicate) > 0
