"""
Authentication utilities for JWT token management and password hashing.
Provides access/refresh/reset token issuance, fail-closed validation and
bcrypt hashing.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from realestate.config import settings
from realestate.utils.exceptions import InvalidTokenError
import logging
import uuid

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
RESET = "reset"

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


@dataclass
class TokenPayload:
    """Decoded JWT claims."""

    sub: str
    type: Optional[str]
    jti: Optional[str]
    exp: datetime
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from decoded claims."""
        return cls(
            sub=data["sub"],
            type=data.get("type"),
            jti=data.get("jti"),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
            name=data.get("name"),
            email=data.get("email"),
            role=data.get("role"),
            claims=data,
        )


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({
        "jti": uuid.uuid4().hex,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + expires_delta,
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token carrying the user's identity and role.

    Args:
        user: User with id, name, email and role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    return _encode(
        {
            "sub": str(user.id),
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "type": ACCESS,
        },
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT refresh token; it carries only the subject."""
    return _encode(
        {"sub": str(user.id), "type": REFRESH},
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days),
    )


def create_reset_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived password reset token."""
    return _encode(
        {"sub": str(user_id), "type": RESET},
        expires_delta or timedelta(minutes=settings.password_reset_expire_minutes),
    )


def issue_tokens(user) -> Tuple[str, str]:
    """Issue an (access, refresh) token pair for a user."""
    return create_access_token(user), create_refresh_token(user)


def validate_token(token: str, expected_type: Optional[str] = None) -> Optional[TokenPayload]:
    """
    Verify and decode a JWT token.

    Checks signature, expiry (no clock skew), issuer, audience and that the
    subject is a user id. Never raises: any failure yields None.

    Args:
        token: JWT token string
        expected_type: Required value of the "type" claim, if any

    Returns:
        TokenPayload if valid, None otherwise
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

    if not payload.get("sub") or "exp" not in payload:
        return None

    try:
        uuid.UUID(str(payload["sub"]))
    except ValueError:
        logger.debug("Token rejected: subject is not a user id")
        return None

    if expected_type is not None and payload.get("type") != expected_type:
        logger.debug(f"Token rejected: expected type {expected_type}, got {payload.get('type')}")
        return None

    try:
        return TokenPayload.from_dict(payload)
    except (KeyError, TypeError, ValueError):
        return None


def token_expired(token: str) -> bool:
    """True when the token is authentic but past its expiry."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"verify_exp": False},
        )
    except JWTError:
        return False

    exp = payload.get("exp")
    return exp is not None and exp <= datetime.now(timezone.utc).timestamp()


def rotate_tokens(refresh_token: str, user) -> Tuple[str, str]:
    """
    Exchange a valid refresh token for a brand-new token pair.

    Raises:
        InvalidTokenError: If the token is not a valid refresh token for the user
    """
    payload = validate_token(refresh_token, expected_type=REFRESH)
    if payload is None or payload.sub != str(user.id):
        raise InvalidTokenError("Invalid refresh token")

    return issue_tokens(user)


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password is required")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hash.
    Malformed hashes count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verification when no user matched."""
    pwd_context.dummy_verify()
