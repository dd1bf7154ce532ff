"""
Pydantic schemas for authentication, token and password-recovery flows.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from realestate.schemas.common import CamelModel
from realestate.schemas.user import UserDTO


class LoginRequest(CamelModel):
    email: str = Field(..., examples=["ana@example.com"])
    password: str = Field(..., examples=["secret123"])


class TokenResponse(CamelModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: Optional[UserDTO] = None


class RefreshRequest(CamelModel):
    refresh_token: str


class TokenValidateRequest(CamelModel):
    token: str


class TokenValidation(CamelModel):
    valid: bool
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    type: str
    expires_at: datetime


class PasswordRecoverRequest(CamelModel):
    email: str


class PasswordUpdateRequest(CamelModel):
    token: str
    new_password: str


class ResetTokenStatus(CamelModel):
    valid: bool
    user_id: str
