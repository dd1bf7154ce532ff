"""
Password recovery endpoints.
"""

from fastapi import APIRouter, Depends, Path

from realestate.schemas.auth import PasswordRecoverRequest, PasswordUpdateRequest, ResetTokenStatus
from realestate.schemas.common import ApiResponse, envelope
from realestate.services.password import PasswordService
from realestate.utils.dependencies import get_password_service

router = APIRouter(prefix="/password", tags=["Password"])


@router.post("/recover", response_model=ApiResponse[None], summary="Request a password reset link")
async def recover_password(
    request: PasswordRecoverRequest,
    password_service: PasswordService = Depends(get_password_service),
):
    await password_service.request_reset(request.email)
    return envelope(message="If the email is registered, a reset link has been sent")


@router.get("/reset/{token}", response_model=ApiResponse[ResetTokenStatus], summary="Check a reset token")
async def check_reset_token(
    token: str = Path(...),
    password_service: PasswordService = Depends(get_password_service),
):
    user_id = password_service.verify_reset(token)
    return envelope(ResetTokenStatus(valid=True, user_id=str(user_id)))


@router.patch("/update", response_model=ApiResponse[None], summary="Set a new password")
async def update_password(
    request: PasswordUpdateRequest,
    password_service: PasswordService = Depends(get_password_service),
):
    await password_service.update_password(request.token, request.new_password)
    return envelope(message="Password updated")
