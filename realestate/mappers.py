"""
Conversions between persisted models and wire DTOs.

Model -> DTO functions build response schemas; DTO -> values functions build
the column maps handed to repositories. Server-generated fields (id,
created_at, updated_at) are never taken from client input.
"""

from typing import Any, Dict, Iterable, Optional
import uuid

from realestate.models import Owner, Property, PropertyImage, PropertyTrace, User
from realestate.schemas.image import ImageCreate, ImageDTO
from realestate.schemas.owner import OwnerCreate, OwnerDTO
from realestate.schemas.property import PropertyBase, PropertyDTO
from realestate.schemas.trace import TraceCreate, TraceDTO, TraceInput
from realestate.schemas.user import UserDTO


def parse_id(value: Any) -> Any:
    """
    Turn an id string into a UUID. Unparseable input is returned unchanged so
    the validators can report it.
    """
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        try:
            return uuid.UUID(value.strip())
        except ValueError:
            return value
    return value


# Model -> DTO

def to_image_dto(image: Optional[PropertyImage]) -> Optional[ImageDTO]:
    return ImageDTO.model_validate(image) if image is not None else None


def to_trace_dto(trace: PropertyTrace) -> TraceDTO:
    return TraceDTO.model_validate(trace)


def to_property_dto(
    prop: Property,
    image: Optional[PropertyImage] = None,
    traces: Optional[Iterable[PropertyTrace]] = None,
) -> PropertyDTO:
    """Map a property with its (optional) first image and traces."""
    dto = PropertyDTO.model_validate(prop)
    return dto.model_copy(update={
        "image": to_image_dto(image),
        "traces": [to_trace_dto(t) for t in traces] if traces is not None else None,
    })


def to_owner_dto(owner: Owner) -> OwnerDTO:
    return OwnerDTO.model_validate(owner)


def to_user_dto(user: User) -> UserDTO:
    return UserDTO.model_validate(user)


# DTO -> column values

def property_values(dto: PropertyBase) -> Dict[str, Any]:
    return {
        "name": dto.name,
        "address": dto.address,
        "price": dto.price,
        "code_internal": dto.code_internal,
        "year": dto.year,
        "id_owner": parse_id(dto.id_owner),
    }


def owner_values(dto: OwnerCreate) -> Dict[str, Any]:
    return dto.model_dump(include={"name", "address", "photo", "birthday"})


def image_values(dto: ImageCreate) -> Dict[str, Any]:
    return {
        "id_property": parse_id(dto.id_property),
        "file": dto.file,
        "enabled": dto.enabled,
    }


def trace_values(dto: TraceInput, id_property: Any = None) -> Dict[str, Any]:
    """Map a trace payload; embedded traces take the id of their property."""
    if id_property is None and isinstance(dto, TraceCreate):
        id_property = dto.id_property
    return {
        "id_property": parse_id(id_property),
        "date_sale": dto.date_sale,
        "name": dto.name,
        "value": dto.value,
        "tax": dto.tax,
    }


def user_values(name: str, email: str, role: Optional[str]) -> Dict[str, Any]:
    """Normalize user identity fields: email and role are stored lower-case."""
    return {
        "name": name,
        "email": email.strip().lower() if isinstance(email, str) else email,
        "role": role.strip().lower() if isinstance(role, str) else role,
    }