"""
Pydantic schemas for property traces (sale history).
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from realestate.schemas.common import CamelModel


class TraceInput(CamelModel):
    """Trace embedded in a property creation request."""

    date_sale: str = Field(..., description="Sale date", examples=["2023-05-10"])
    name: str = Field(..., description="Trace label", examples=["First sale"])
    value: int = Field(..., description="Sale value in the smallest currency unit")
    tax: int = Field(0, description="Tax paid in the smallest currency unit")


class TraceCreate(TraceInput):
    id_property: str = Field(..., description="Property id")


class TraceUpdate(TraceCreate):
    """Full trace replacement (PUT)."""


class TraceDTO(CamelModel):
    id: UUID
    id_property: UUID
    date_sale: str
    name: str
    value: int
    tax: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
