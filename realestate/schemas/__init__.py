"""
Pydantic schemas for request/response serialization.
"""

from realestate.schemas.common import ApiResponse, Page, PageMeta, envelope
from realestate.schemas.property import PropertyCreate, PropertyUpdate, PropertyDTO
from realestate.schemas.owner import OwnerCreate, OwnerUpdate, OwnerDTO
from realestate.schemas.image import ImageInput, ImageCreate, ImageUpdate, ImageDTO
from realestate.schemas.trace import TraceInput, TraceCreate, TraceUpdate, TraceDTO
from realestate.schemas.user import UserCreate, UserUpdate, UserDTO

__all__ = [
    "ApiResponse", "Page", "PageMeta", "envelope",
    "PropertyCreate", "PropertyUpdate", "PropertyDTO",
    "OwnerCreate", "OwnerUpdate", "OwnerDTO",
    "ImageInput", "ImageCreate", "ImageUpdate", "ImageDTO",
    "TraceInput", "TraceCreate", "TraceUpdate", "TraceDTO",
    "UserCreate", "UserUpdate", "UserDTO",
]
