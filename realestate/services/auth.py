"""
Authentication service for login, registration and token management.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from realestate.config import settings
from realestate.models import User
from realestate.repositories import UserRepository
from realestate.schemas.auth import TokenValidation
from realestate.schemas.user import UserCreate
from realestate.services.cache import ResultCache
from realestate.services.user import UserService
from realestate.utils.auth import (
    ACCESS,
    REFRESH,
    dummy_verify,
    issue_tokens,
    rotate_tokens,
    token_expired,
    validate_token,
    verify_password,
)
from realestate.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthorizedError,
)
from realestate.utils.validators import LoginValidator

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication flows. Unknown emails and wrong passwords are
    indistinguishable to the caller.
    """

    def __init__(self, db_session: AsyncSession, cache: ResultCache):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.user_service = UserService(db_session, cache)

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            ValidationError: If email or password are malformed
            InvalidCredentialsError: If credentials do not match a user
        """
        LoginValidator().ensure_valid({"email": email, "password": password})

        user = await self.user_repo.get_by_email(email)
        if user is None:
            # Same bcrypt cost whether or not the account exists
            dummy_verify()
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = issue_tokens(user)
        return user, access_token, refresh_token

    async def register(self, user_data: UserCreate) -> User:
        """Self-service registration; the role is always the default role."""
        return await self.user_service.create(user_data, role=settings.default_role)

    async def refresh(self, refresh_token: str) -> Tuple[User, str, str]:
        """
        Rotate a refresh token into a new token pair.

        Raises:
            InvalidTokenError: If the token is invalid or its user is gone
        """
        payload = validate_token(refresh_token, expected_type=REFRESH)
        if payload is None:
            raise InvalidTokenError("Invalid refresh token")

        user = await self.user_repo.get_by_id(payload.user_id)
        if user is None:
            raise InvalidTokenError("Invalid refresh token")

        access_token, new_refresh_token = rotate_tokens(refresh_token, user)
        logger.info(f"Tokens refreshed for user: {user.id}")
        return user, access_token, new_refresh_token

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            TokenExpiredError: If the access token has expired
            InvalidTokenError: If the token is not a valid access token
            UnauthorizedError: If the user no longer exists
        """
        payload = validate_token(token, expected_type=ACCESS)
        if payload is None:
            if token_expired(token):
                raise TokenExpiredError()
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(payload.user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return user

    def describe_token(self, token: str) -> TokenValidation:
        """
        Report the claims of a valid token.

        Raises:
            InvalidTokenError: If the token does not validate
        """
        payload = validate_token(token)
        if payload is None:
            raise InvalidTokenError()

        return TokenValidation(
            valid=True,
            user_id=payload.sub,
            email=payload.email,
            role=payload.role,
            type=payload.type or ACCESS,
            expires_at=payload.exp,
        )
