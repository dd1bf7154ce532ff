"""
Partial-update (PATCH) reconciliation.

Client field maps are resolved against an explicit per-entity field table.
Keys match case-insensitively with underscores ignored, so "idOwner",
"id_owner" and "IDOWNER" name the same field. Unknown keys are dropped.
The merged entity is validated before a single UPDATE is issued, and the
entity's cache entries are invalidated afterwards.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple
from pydantic.alias_generators import to_camel
import uuid
import logging

from realestate.mappers import parse_id
from realestate.repositories.base import BaseRepository
from realestate.repositories.user import UserRepository
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, alternate_key, entity_key
from realestate.utils.auth import hash_password
from realestate.utils.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from realestate.utils.validators import EntityValidator

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


# Coercers: raise ValueError with a short reason on bad input

def as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError("must be a string")


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError("must be an integer")


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
        return value.strip().lower() in ("true", "1")
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError("must be a boolean")


def as_id(value: Any) -> uuid.UUID:
    parsed = parse_id(value)
    if not isinstance(parsed, uuid.UUID):
        raise ValueError("must be a valid id")
    return parsed


@dataclass(frozen=True)
class PatchField:
    """One patchable attribute and the coercion applied to client input."""

    attr: str
    coerce: Callable[[Any], Any] = as_str

    @property
    def label(self) -> str:
        return to_camel(self.attr)


class PatchReconciler:
    """
    Applies a client field map to one stored entity.

    Subclasses declare `fields` and may override the hooks:
    `authorize` (reject the raw map up front), `reconcile` (adjust changes
    before validation), `before_write` (turn changes into column writes) and
    `cache_keys` (entries to invalidate).
    """

    resource: str = "Entity"
    namespace: str = ""
    fields: Tuple[PatchField, ...] = ()

    def __init__(self, repository: BaseRepository, validator: EntityValidator, cache: ResultCache):
        self.repository = repository
        self.validator = validator
        self.cache = cache
        self._lookup = {normalize_key(f.attr): f for f in self.fields}

    def resolve(self, field_map: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Match client keys against the field table and coerce their values.

        Raises:
            BadRequestError: If no key names a known field
            ValidationError: If any recognized value cannot be coerced
        """
        changes: Dict[str, Any] = {}
        errors: List[str] = []
        recognized = False

        for key, raw in field_map.items():
            field = self._lookup.get(normalize_key(key))
            if field is None:
                logger.debug(f"Ignoring unknown {self.resource} field: {key}")
                continue

            recognized = True
            try:
                changes[field.attr] = field.coerce(raw)
            except (TypeError, ValueError) as e:
                errors.append(f"{field.label} {e}")

        if not recognized:
            raise BadRequestError("No valid fields were sent")
        if errors:
            raise ValidationError(errors)
        return changes

    def authorize(self, field_map: Mapping[str, Any], requester=None) -> None:
        """Reject the whole patch before any value is coerced."""

    def current_values(self, entity) -> Dict[str, Any]:
        return {f.attr: getattr(entity, f.attr) for f in self.fields if hasattr(entity, f.attr)}

    async def reconcile(self, entity, changes: Dict[str, Any], requester=None) -> Dict[str, Any]:
        return changes

    async def before_write(self, entity, changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    def cache_keys(self, entity, changes: Dict[str, Any]) -> List[Hashable]:
        return [entity_key(self.namespace, entity.id)]

    async def patch(self, entity_id: uuid.UUID, field_map: Optional[Mapping[str, Any]], requester=None):
        """
        Apply a partial update.

        Args:
            entity_id: Target entity
            field_map: Client-supplied field values
            requester: Authenticated user performing the change

        Returns:
            The reloaded entity

        Raises:
            BadRequestError: Empty map or no recognized field
            NotFoundError: Entity does not exist
            ForbiddenError: The requester may not change a sent field
            ValidationError: Coercion or entity rules failed
        """
        if not field_map:
            raise BadRequestError("No fields were sent")

        entity = await self.repository.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.resource, str(entity_id))

        self.authorize(field_map, requester)
        changes = self.resolve(field_map)
        changes = await self.reconcile(entity, changes, requester)

        merged = self.current_values(entity)
        merged.update(changes)
        self.validator.ensure_valid(merged)

        # Keys depend on pre-update values; reloading refreshes `entity` in place
        keys = self.cache_keys(entity, changes)
        writes = await self.before_write(entity, changes)
        if writes:
            await self.repository.update(entity.id, writes)
            logger.info(f"Patched {self.resource} {entity.id}: {sorted(changes)}")

        self.cache.invalidate(*keys)
        return await self.repository.get_by_id(entity.id)


class PropertyPatchReconciler(PatchReconciler):
    resource = "Property"
    namespace = ns.PROPERTY
    fields = (
        PatchField("name"),
        PatchField("address"),
        PatchField("price", as_int),
        PatchField("code_internal", as_int),
        PatchField("year", as_int),
        PatchField("id_owner", as_id),
    )


class OwnerPatchReconciler(PatchReconciler):
    resource = "Owner"
    namespace = ns.OWNER
    fields = (
        PatchField("name"),
        PatchField("address"),
        PatchField("photo"),
        PatchField("birthday"),
    )


class ImagePatchReconciler(PatchReconciler):
    resource = "PropertyImage"
    namespace = ns.IMAGE
    fields = (
        PatchField("id_property", as_id),
        PatchField("file"),
        PatchField("enabled", as_bool),
    )

    def cache_keys(self, entity, changes: Dict[str, Any]) -> List[Hashable]:
        keys = super().cache_keys(entity, changes)
        keys.append(entity_key(ns.PROPERTY, entity.id_property))
        if "id_property" in changes:
            keys.append(entity_key(ns.PROPERTY, changes["id_property"]))
        return keys


class TracePatchReconciler(PatchReconciler):
    resource = "PropertyTrace"
    namespace = ns.TRACE
    fields = (
        PatchField("id_property", as_id),
        PatchField("date_sale"),
        PatchField("name"),
        PatchField("value", as_int),
        PatchField("tax", as_int),
    )

    def cache_keys(self, entity, changes: Dict[str, Any]) -> List[Hashable]:
        keys = super().cache_keys(entity, changes)
        keys.append(entity_key(ns.PROPERTY, entity.id_property))
        if "id_property" in changes:
            keys.append(entity_key(ns.PROPERTY, changes["id_property"]))
        return keys


class UserPatchReconciler(PatchReconciler):
    """
    User patches: role changes need an admin, a non-empty password is hashed
    (an empty one keeps the stored hash) and a new email must be unused.
    """

    resource = "User"
    namespace = ns.USER
    fields = (
        PatchField("name"),
        PatchField("email"),
        PatchField("password"),
        PatchField("role"),
    )
    repository: UserRepository

    def authorize(self, field_map: Mapping[str, Any], requester=None) -> None:
        if any(normalize_key(key) == "role" for key in field_map):
            if requester is None or not requester.is_admin:
                raise ForbiddenError("Only administrators can change roles")

    async def reconcile(self, entity, changes: Dict[str, Any], requester=None) -> Dict[str, Any]:
        if "role" in changes:
            changes["role"] = changes["role"].strip().lower()

        if "password" in changes and not changes["password"]:
            del changes["password"]

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
        return changes

    async def before_write(self, entity, changes: Dict[str, Any]) -> Dict[str, Any]:
        writes = dict(changes)

        email = writes.get("email")
        if email is not None and email != entity.email:
            if await self.repository.email_taken(email, exclude_id=entity.id):
                raise ConflictError("Email already in use")

        password = writes.pop("password", None)
        if password:
            writes["hashed_password"] = hash_password(password)
        return writes

    def cache_keys(self, entity, changes: Dict[str, Any]) -> List[Hashable]:
        keys = super().cache_keys(entity, changes)
        keys.append(alternate_key(ns.USER, "email", entity.email))
        if changes.get("email"):
            keys.append(alternate_key(ns.USER, "email", changes["email"]))
        return keys
