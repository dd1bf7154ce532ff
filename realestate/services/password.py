"""
Password recovery: reset-token issuance, verification and password update.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid
import logging

from realestate.config import settings
from realestate.repositories import UserRepository
from realestate.services import cache as ns
from realestate.services.cache import ResultCache, alternate_key, entity_key
from realestate.utils.auth import RESET, create_reset_token, hash_password, validate_token
from realestate.utils.exceptions import InvalidTokenError, NotFoundError, ValidationError
from realestate.utils.validators import PasswordUpdateValidator, is_valid_email

logger = logging.getLogger(__name__)


class ResetLinkSender:
    """Delivers password reset links. The default implementation logs them."""

    async def send(self, email: str, link: str) -> None:
        logger.info(f"Password reset link for {email}: {link}")


class PasswordService:
    def __init__(
        self,
        db_session: AsyncSession,
        cache: ResultCache,
        sender: Optional[ResetLinkSender] = None,
    ):
        self.db = db_session
        self.cache = cache
        self.user_repo = UserRepository(db_session)
        self.sender = sender or ResetLinkSender()

    async def request_reset(self, email: str) -> None:
        """
        Send a reset link if the email belongs to a user. The outcome is the
        same either way so callers cannot tell which accounts exist.

        Raises:
            ValidationError: If the email is malformed
        """
        if not is_valid_email(email):
            raise ValidationError(["email is not a valid email address"])

        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.info(f"Password reset requested for unknown email: {email}")
            return

        token = create_reset_token(user.id)
        await self.sender.send(user.email, f"{settings.frontend_url.rstrip('/')}/password-reset/{token}")

    def verify_reset(self, token: str) -> uuid.UUID:
        """
        Check a reset token and return the user it was issued for.

        Raises:
            InvalidTokenError: If the token is invalid or expired
        """
        payload = validate_token(token, expected_type=RESET)
        if payload is None:
            raise InvalidTokenError("Invalid or expired reset token")
        return payload.user_id

    async def update_password(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            ValidationError: If the input is malformed
            InvalidTokenError: If the token is invalid or expired
            NotFoundError: If the user no longer exists
        """
        PasswordUpdateValidator().ensure_valid({"token": token, "new_password": new_password})
        user_id = self.verify_reset(token)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        await self.user_repo.update(user.id, {"hashed_password": hash_password(new_password)})
        self.cache.invalidate(entity_key(ns.USER, user.id), alternate_key(ns.USER, "email", user.email))
        logger.info(f"Password updated for user: {user.id}")
