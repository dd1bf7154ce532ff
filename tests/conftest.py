"""
Test configuration and fixtures for the real estate API.
Provides an in-memory database per test, services, data factories and an HTTP client.
"""

import os

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"

import pytest
import uuid
from typing import AsyncGenerator, Dict, Optional
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from realestate.database import Base, get_db
from realestate.main import app
from realestate.models import Owner, Property, PropertyImage, PropertyTrace, User
from realestate.repositories import (
    ImageRepository,
    OwnerRepository,
    PropertyRepository,
    TraceRepository,
    UserRepository,
)
from realestate.services.auth import AuthService
from realestate.services.cache import ResultCache, get_result_cache
from realestate.services.image import ImageService
from realestate.services.owner import OwnerService
from realestate.services.password import PasswordService
from realestate.services.property import PropertyService
from realestate.services.trace import TraceService
from realestate.services.user import UserService
from realestate.utils.auth import create_access_token, hash_password

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
async def engine():
    """Fresh in-memory database for each test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache() -> ResultCache:
    return ResultCache(ttl_seconds=300)


@pytest.fixture
async def async_client(session_factory, cache) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app; every request gets its own session."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_result_cache] = lambda: cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def owner_repository(db_session: AsyncSession) -> OwnerRepository:
    return OwnerRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


@pytest.fixture
def trace_repository(db_session: AsyncSession) -> TraceRepository:
    return TraceRepository(db_session)


@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


# Service fixtures
@pytest.fixture
def property_service(db_session: AsyncSession, cache: ResultCache) -> PropertyService:
    return PropertyService(db_session, cache, cascade_traces=False)


@pytest.fixture
def owner_service(db_session: AsyncSession, cache: ResultCache) -> OwnerService:
    return OwnerService(db_session, cache)


@pytest.fixture
def image_service(db_session: AsyncSession, cache: ResultCache) -> ImageService:
    return ImageService(db_session, cache)


@pytest.fixture
def trace_service(db_session: AsyncSession, cache: ResultCache) -> TraceService:
    return TraceService(db_session, cache)


@pytest.fixture
def user_service(db_session: AsyncSession, cache: ResultCache) -> UserService:
    return UserService(db_session, cache)


@pytest.fixture
def auth_service(db_session: AsyncSession, cache: ResultCache) -> AuthService:
    return AuthService(db_session, cache)


class RecordingSender:
    """Reset link sender that keeps what it was asked to send."""

    def __init__(self):
        self.sent = []

    async def send(self, email: str, link: str) -> None:
        self.sent.append((email, link))


@pytest.fixture
def reset_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def password_service(db_session: AsyncSession, cache: ResultCache, reset_sender) -> PasswordService:
    return PasswordService(db_session, cache, sender=reset_sender)


# Test data factories
class OwnerFactory:
    """Factory for creating test owners."""

    @staticmethod
    def data(**overrides) -> dict:
        values = {
            "name": "Laura Gomez",
            "address": "Carrera 7 # 40-12",
            "photo": "https://cdn.example.com/owners/laura.jpg",
            "birthday": "1985-04-23",
        }
        values.update(overrides)
        return values

    @staticmethod
    async def create(session: AsyncSession, **overrides) -> Owner:
        return await OwnerRepository(session).create(OwnerFactory.data(**overrides))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def data(id_owner: uuid.UUID, **overrides) -> dict:
        values = {
            "name": "Casa Campestre",
            "address": "Calle 10 # 5-20",
            "price": 350_000_000,
            "code_internal": 1001,
            "year": 2015,
            "id_owner": id_owner,
        }
        values.update(overrides)
        return values

    @staticmethod
    def payload(id_owner: uuid.UUID, **overrides) -> dict:
        """Wire (camelCase) body for the property endpoints."""
        values = {
            "name": "Casa Campestre",
            "address": "Calle 10 # 5-20",
            "price": 350_000_000,
            "codeInternal": 1001,
            "year": 2015,
            "idOwner": str(id_owner),
        }
        values.update(overrides)
        return values

    @staticmethod
    async def create(session: AsyncSession, id_owner: uuid.UUID, **overrides) -> Property:
        return await PropertyRepository(session).create(PropertyFactory.data(id_owner, **overrides))


class ImageFactory:
    """Factory for creating test property images."""

    @staticmethod
    async def create(
        session: AsyncSession,
        id_property: uuid.UUID,
        file: str = "https://cdn.example.com/properties/1.jpg",
        enabled: bool = True,
    ) -> PropertyImage:
        return await ImageRepository(session).create({
            "id_property": id_property,
            "file": file,
            "enabled": enabled,
        })


class TraceFactory:
    """Factory for creating test property traces."""

    @staticmethod
    async def create(session: AsyncSession, id_property: uuid.UUID, **overrides) -> PropertyTrace:
        values = {
            "id_property": id_property,
            "date_sale": "2023-05-10",
            "name": "First sale",
            "value": 300_000_000,
            "tax": 12_000_000,
        }
        values.update(overrides)
        return await TraceRepository(session).create(values)


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create(
        session: AsyncSession,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: str = "user",
    ) -> User:
        return await UserRepository(session).create({
            "name": name,
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": hash_password(password),
            "role": role,
        })


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


# Common test fixtures
@pytest.fixture
async def test_owner(db_session: AsyncSession) -> Owner:
    return await OwnerFactory.create(db_session)


@pytest.fixture
async def test_property(db_session: AsyncSession, test_owner: Owner) -> Property:
    return await PropertyFactory.create(db_session, test_owner.id)


@pytest.fixture
async def test_admin(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="admin@example.com", name="Admin User", role="admin")


@pytest.fixture
async def test_editor(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="editor@example.com", name="Editor User", role="editor")


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await UserFactory.create(db_session, email="user@example.com", name="Regular User", role="user")


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin)


@pytest.fixture
def editor_headers(test_editor: User) -> Dict[str, str]:
    return auth_headers(test_editor)


@pytest.fixture
def user_headers(test_user: User) -> Dict[str, str]:
    return auth_headers(test_user)
