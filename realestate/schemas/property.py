"""
Pydantic schemas for property requests and responses.
"""

from pydantic import Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from realestate.schemas.common import CamelModel
from realestate.schemas.image import ImageDTO, ImageInput
from realestate.schemas.trace import TraceDTO, TraceInput


class PropertyBase(CamelModel):
    """Client-editable property fields."""

    name: str = Field(..., max_length=255, description="Listing name", examples=["Casa Campestre"])
    address: str = Field(..., max_length=500, description="Street address", examples=["Calle 10 # 5-20"])
    price: int = Field(..., description="Price in the smallest currency unit", examples=[350000000])
    code_internal: int = Field(..., description="Internal catalogue code", examples=[1001])
    year: int = Field(..., description="Construction year", examples=[2015])
    id_owner: str = Field(..., description="Owner id")


class PropertyCreate(PropertyBase):
    """
    Property creation payload. An embedded image and traces are optional and
    are stored alongside the property.
    """

    image: Optional[ImageInput] = None
    traces: Optional[List[TraceInput]] = None


class PropertyUpdate(PropertyBase):
    """Full property replacement (PUT)."""


class PropertyDTO(CamelModel):
    """Property as returned to clients; image and traces are filled by the service."""

    id: UUID
    name: str
    address: str
    price: int
    code_internal: int
    year: int
    id_owner: UUID
    image: Optional[ImageDTO] = None
    traces: Optional[List[TraceDTO]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
