"""
Pydantic schemas for owners.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from realestate.schemas.common import CamelModel


class OwnerCreate(CamelModel):
    name: str = Field(..., max_length=255, examples=["Laura Gómez"])
    address: str = Field(..., max_length=500, examples=["Carrera 7 # 40-12"])
    photo: str = Field(..., description="Photo URL", examples=["https://cdn.example.com/o/1.jpg"])
    birthday: str = Field(..., description="Birth date", examples=["1985-04-23"])


class OwnerUpdate(OwnerCreate):
    """Full owner replacement (PUT)."""


class OwnerDTO(CamelModel):
    id: UUID
    name: str
    address: str
    photo: str
    birthday: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
