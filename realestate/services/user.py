"""
User service: account CRUD with email uniqueness and role rules.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List, Mapping, Optional, Sequence
import uuid
import logging

from realestate.config import settings
from realestate.mappers import to_user_dto, user_values
from realestate.models import User
from realestate.repositories import UserRepository
from realestate.repositories.filters import UserFilters
from realestate.schemas.common import Page
from realestate.schemas.user import UserCreate, UserDTO, UserUpdate
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, alternate_key, entity_key
from realestate.services.listing import PaginatedListService
from realestate.services.patch import UserPatchReconciler
from realestate.utils.auth import hash_password
from realestate.utils.exceptions import ConflictError, ForbiddenError, NotFoundError
from realestate.utils.validators import UserValidator

logger = logging.getLogger(__name__)


class UserService:
    """
    User management. Emails are unique and stored lower-case; only
    administrators may assign or change roles.
    """

    def __init__(self, db_session: AsyncSession, cache: ResultCache):
        self.db = db_session
        self.cache = cache
        self.user_repo = UserRepository(db_session)
        self.validator = UserValidator()
        self.listing = PaginatedListService(self.user_repo, cache, ns.USER, self._map_page)
        self.patcher = UserPatchReconciler(self.user_repo, self.validator, cache)

    async def _map_page(self, rows: Sequence[User]) -> List[UserDTO]:
        return [to_user_dto(row) for row in rows]

    def _invalidate(self, user_id: uuid.UUID, *emails: str) -> None:
        keys = [entity_key(ns.USER, user_id)]
        keys.extend(alternate_key(ns.USER, "email", email) for email in emails if email)
        self.cache.invalidate(*keys)

    async def list(
        self,
        filters: UserFilters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Page:
        return await self.listing.list(filters, page=page, limit=limit, force_refresh=force_refresh)

    async def get(self, user_id: uuid.UUID) -> UserDTO:
        key = entity_key(ns.USER, user_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        dto = to_user_dto(user)
        self.cache.set(key, dto)
        return dto

    async def get_by_email(self, email: str) -> UserDTO:
        email = email.strip().lower()
        key = alternate_key(ns.USER, "email", email)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        user = await self.user_repo.get_by_email(email)
        if user is None:
            raise NotFoundError("User", email)

        dto = to_user_dto(user)
        self.cache.set(key, dto)
        return dto

    async def create(self, user_data: UserCreate, role: Optional[str] = None) -> User:
        """
        Create a user account.

        Args:
            user_data: Account data
            role: Role override; defaults to the payload role, then the default role

        Raises:
            ValidationError: If the data breaks a user rule
            ConflictError: If the email is already registered
        """
        values = user_values(user_data.name, user_data.email, role or user_data.role or settings.default_role)
        UserValidator(require_password=True).ensure_valid({**values, "password": user_data.password})

        if await self.user_repo.email_taken(values["email"]):
            raise ConflictError("Email already in use")

        values["hashed_password"] = hash_password(user_data.password)
        user = await self.user_repo.create(values)
        logger.info(f"User created: {user.email} (role: {user.role})")
        return user

    async def replace(self, user_id: uuid.UUID, user_data: UserUpdate, requester=None) -> UserDTO:
        """
        Replace a user's name, email and role (PUT). An empty password keeps
        the stored hash.

        Raises:
            NotFoundError: If the user does not exist
            ForbiddenError: If a non-admin changes the role
            ConflictError: If the new email belongs to another user
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        previous_email = user.email

        values = user_values(user_data.name, user_data.email, user_data.role or user.role)
        if values["role"] != user.role and (requester is None or not requester.is_admin):
            raise ForbiddenError("Only administrators can change roles")

        self.validator.ensure_valid({**values, "password": user_data.password})

        if values["email"] != user.email and await self.user_repo.email_taken(values["email"], exclude_id=user.id):
            raise ConflictError("Email already in use")

        if user_data.password:
            values["hashed_password"] = hash_password(user_data.password)

        updated = await self.user_repo.replace(user_id, values)
        self._invalidate(user_id, previous_email, values["email"])
        return to_user_dto(updated)

    async def patch(self, user_id: uuid.UUID, field_map: Mapping[str, Any], requester=None) -> UserDTO:
        return to_user_dto(await self.patcher.patch(user_id, field_map, requester))

    async def delete(self, user_id: uuid.UUID) -> None:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        await self.user_repo.delete(user_id)
        self._invalidate(user_id, user.email)
        logger.info(f"User deleted: {user_id}")
