"""
Pydantic schemas for property images.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from realestate.schemas.common import CamelModel


class ImageInput(CamelModel):
    """Image embedded in a property creation request."""

    file: str = Field(..., description="Image URL or encoded content", examples=["https://cdn.example.com/p/1.jpg"])
    enabled: bool = Field(True, description="Whether the image is shown")


class ImageCreate(ImageInput):
    """Standalone image creation (upserts by property)."""

    id_property: str = Field(..., description="Owning property id")


class ImageUpdate(ImageCreate):
    """Full image replacement (PUT)."""


class ImageDTO(CamelModel):
    id: UUID
    id_property: UUID
    file: str
    enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
