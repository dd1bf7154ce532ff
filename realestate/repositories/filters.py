"""
Query filters for the list endpoints.

Each filter object turns its optional criteria into a single AND-ed SQLAlchemy
predicate and exposes a hashable key that identifies the criteria set in the
result cache. Building a predicate never touches the database.
"""

from dataclasses import dataclass, fields
from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement
from typing import Any, List, Optional, Tuple
import uuid

from realestate.models import Owner, Property, PropertyImage, PropertyTrace, User


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_ci(column, value: str) -> ColumnElement[bool]:
    """Case-insensitive substring match."""
    return column.ilike(f"%{escape_like(value)}%", escape="\\")


def combine(conditions: List[ColumnElement[bool]]) -> ColumnElement[bool]:
    """AND the conditions together; no conditions matches everything."""
    if not conditions:
        return true()
    if len(conditions) == 1:
        return conditions[0]
    return and_(*conditions)


@dataclass(frozen=True)
class _Filters:
    """Blank strings are treated as absent criteria; other strings are kept as sent."""

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str) and not value.strip():
                object.__setattr__(self, f.name, None)

    def cache_key(self) -> Tuple[Tuple[str, Any], ...]:
        key = []
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, uuid.UUID):
                value = str(value)
            key.append((f.name, value))
        return tuple(key)

    def to_predicate(self) -> ColumnElement[bool]:
        raise NotImplementedError


@dataclass(frozen=True)
class PropertyFilters(_Filters):
    name: Optional[str] = None
    address: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    id_owner: Optional[uuid.UUID] = None

    def to_predicate(self) -> ColumnElement[bool]:
        conditions = []
        if self.name:
            conditions.append(contains_ci(Property.name, self.name))
        if self.address:
            conditions.append(contains_ci(Property.address, self.address))
        # Price bounds are inclusive
        if self.min_price is not None:
            conditions.append(Property.price >= self.min_price)
        if self.max_price is not None:
            conditions.append(Property.price <= self.max_price)
        if self.id_owner is not None:
            conditions.append(Property.id_owner == self.id_owner)
        return combine(conditions)


@dataclass(frozen=True)
class OwnerFilters(_Filters):
    name: Optional[str] = None
    address: Optional[str] = None

    def to_predicate(self) -> ColumnElement[bool]:
        conditions = []
        if self.name:
            conditions.append(contains_ci(Owner.name, self.name))
        if self.address:
            conditions.append(contains_ci(Owner.address, self.address))
        return combine(conditions)


@dataclass(frozen=True)
class ImageFilters(_Filters):
    id_property: Optional[uuid.UUID] = None
    enabled: Optional[bool] = None

    def to_predicate(self) -> ColumnElement[bool]:
        conditions = []
        if self.id_property is not None:
            conditions.append(PropertyImage.id_property == self.id_property)
        if self.enabled is not None:
            conditions.append(PropertyImage.enabled == self.enabled)
        return combine(conditions)


@dataclass(frozen=True)
class TraceFilters(_Filters):
    id_property: Optional[uuid.UUID] = None
    name: Optional[str] = None

    def to_predicate(self) -> ColumnElement[bool]:
        conditions = []
        if self.id_property is not None:
            conditions.append(PropertyTrace.id_property == self.id_property)
        if self.name:
            conditions.append(contains_ci(PropertyTrace.name, self.name))
        return combine(conditions)


@dataclass(frozen=True)
class UserFilters(_Filters):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    def to_predicate(self) -> ColumnElement[bool]:
        conditions = []
        if self.name:
            conditions.append(contains_ci(User.name, self.name))
        if self.email:
            conditions.append(contains_ci(User.email, self.email))
        if self.role:
            conditions.append(User.role == self.role.strip().lower())
        return combine(conditions)
