"""
Pydantic schemas for user requests and responses.
The password hash never leaves the service layer.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from realestate.schemas.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(..., description="Display name (letters and spaces)", examples=["Ana Torres"])
    email: str = Field(..., description="Unique email address", examples=["ana@example.com"])
    password: str = Field(..., description="Plain password, at least 6 characters")
    role: Optional[str] = Field(None, description="user, editor or admin", examples=["user"])


class UserUpdate(CamelModel):
    """
    Full user replacement (PUT). An omitted or empty password keeps the
    stored one.
    """

    name: str
    email: str
    password: Optional[str] = None
    role: Optional[str] = None


class UserDTO(CamelModel):
    id: UUID
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
