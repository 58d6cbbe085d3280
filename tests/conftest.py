"""
Pytest fixtures for testing.

Provides:
- Async SQLite session (and Database wrapper) for the database store
- Memory store, tenant store and feature id provider
- App and test client wired to the memory store
- Token helper for the dashboard
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tenantflags.core.config import (
    AuthSettings,
    DashboardSettings,
    FeatureSettings,
    Settings,
)
from tenantflags.core.container import Container
from tenantflags.core.features import (
    FeatureToggleService,
    MemoryFeatureStore,
    StaticFeatureIdProvider,
    StaticTenantStore,
    Tenant,
)
from tenantflags.core.features import models  # noqa: F401
from tenantflags.main import create_app
from tenantflags.models.base import Base
from tenantflags.models.database import Database


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_SECRET = "test-secret"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create database session with automatic rollback.

    Each test gets a fresh transaction that's rolled back after.
    """
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def database(db_engine) -> Database:
    """Database wrapper around the test engine."""
    return Database(db_engine)


# ============ Providers ============


@pytest.fixture
def memory_store() -> MemoryFeatureStore:
    return MemoryFeatureStore()


@pytest.fixture
def tenant_store() -> StaticTenantStore:
    return StaticTenantStore([
        Tenant(id="acme", name="Acme Corp"),
        Tenant(id="globex", name="Globex"),
    ])


@pytest.fixture
def feature_ids() -> StaticFeatureIdProvider:
    return StaticFeatureIdProvider(["checkout-v2", "dark-mode"])


@pytest.fixture
def service(memory_store, feature_ids, tenant_store) -> FeatureToggleService:
    return FeatureToggleService(
        memory_store,
        feature_id_provider=feature_ids,
        tenant_store=tenant_store,
    )


# ============ App ============


def make_settings(
    *,
    backend: str = "memory",
    secret_key: str = TEST_SECRET,
    **dashboard,
) -> Settings:
    """Testing settings (memory backend by default); dashboard options overridable."""
    dashboard.setdefault("require_authentication", False)
    return Settings(
        environment="testing",
        log_format="text",
        auth=AuthSettings(secret_key=secret_key),
        features=FeatureSettings(backend=backend),
        dashboard=DashboardSettings(**dashboard),
    )


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def container(memory_store, feature_ids, tenant_store) -> Container:
    return (
        Container()
        .register_feature_id_provider(feature_ids)
        .register_tenant_store(tenant_store)
        .register_memory_store(memory_store)
    )


@pytest.fixture
def app(container):
    return create_app(make_settings(), container)


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============ Auth Helpers ============


def make_token(roles: list[str] | str, secret: str = TEST_SECRET) -> str:
    return jwt.encode({"sub": "operator", "roles": roles}, secret, algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_app(container):
    """Factory for apps with custom dashboard options."""
    def factory(**options):
        return create_app(make_settings(**options), container)
    return factory


@pytest.fixture
def token_headers():
    """Factory for Authorization headers carrying the given roles."""
    def factory(roles: list[str] | str, secret: str = TEST_SECRET) -> dict[str, str]:
        return bearer(make_token(roles, secret))
    return factory


@pytest.fixture
def admin_auth_headers(token_headers) -> dict[str, str]:
    return token_headers(["Admin"])
