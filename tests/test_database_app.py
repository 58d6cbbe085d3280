"""
Tests for the administrative API on the database backend.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from tenantflags.api.dependencies import feature_toggle_service_scope
from tenantflags.core.features import DatabaseFeatureStore, StorageError
from tenantflags.main import reconcile_on_startup
from tenantflags.models.database import Database

API = "/tenantflags/api"


async def failing_commit(self):
    raise OperationalError("COMMIT", None, Exception("connection lost"))


@pytest.fixture
def db_app(container, database, make_app):
    container.register_database(database)
    return make_app(backend="database")


@pytest_asyncio.fixture(scope="function")
async def db_client(db_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=db_app),
        base_url="http://test",
    ) as client:
        yield client


async def stored_features(database: Database):
    async with database.session() as session:
        return await DatabaseFeatureStore(session).list_features()


@pytest.mark.asyncio
async def test_changes_are_committed(db_client: AsyncClient, database: Database):
    response = await db_client.post(f"{API}/management/bulk-create-missing")
    assert response.json() == {"created": ["checkout-v2", "dark-mode"]}

    response = await db_client.patch(
        f"{API}/feature-flags/dark-mode",
        params={"tenantId": "acme", "enabled": "true"},
    )
    assert response.status_code == 200

    features = await stored_features(database)
    assert [f.id for f in features] == ["checkout-v2", "dark-mode"]
    async with database.session() as session:
        state = await DatabaseFeatureStore(session).get_tenant_state("acme", "dark-mode")
    assert state.enabled is True


@pytest.mark.asyncio
async def test_commit_failure_returns_503(db_client: AsyncClient, database: Database, monkeypatch):
    monkeypatch.setattr(AsyncSession, "commit", failing_commit)

    response = await db_client.post(f"{API}/management/bulk-create-missing")

    assert response.status_code == 503
    assert response.json()["error"] == "storage_error"

    monkeypatch.undo()
    assert await stored_features(database) == []


@pytest.mark.asyncio
async def test_failed_request_is_rolled_back(db_client: AsyncClient, database: Database):
    await db_client.post(f"{API}/management/bulk-create-missing")

    response = await db_client.patch(
        f"{API}/feature-flags/dark-mode",
        params={"tenantId": "initech", "enabled": "true"},
    )

    assert response.status_code == 404
    async with database.session() as session:
        assert await DatabaseFeatureStore(session).list_tenant_states("dark-mode") == []


@pytest.mark.asyncio
async def test_service_scope_commit_failure_raises_storage_error(
    container, database, settings_factory, monkeypatch
):
    container.register_database(database)
    settings = settings_factory(backend="database")
    container.configure(settings)
    monkeypatch.setattr(AsyncSession, "commit", failing_commit)

    with pytest.raises(StorageError):
        async with feature_toggle_service_scope(container, settings) as service:
            await service.bulk_create_missing()

    assert await reconcile_on_startup(container, settings) == []


@pytest.mark.asyncio
async def test_startup_reconciliation_on_database(container, database, make_app):
    container.register_database(database)
    app = make_app(backend="database", create_missing_features_on_start=True)

    async with app.router.lifespan_context(app):
        features = await stored_features(database)

    assert [f.id for f in features] == ["checkout-v2", "dark-mode"]


@pytest.mark.asyncio
async def test_memory_backend_never_opens_a_session(container, client: AsyncClient):
    class UnusableDatabase(Database):
        def session(self):
            raise AssertionError("memory backend opened a database session")

    container.register_database(
        UnusableDatabase(create_async_engine("sqlite+aiosqlite:///:memory:"))
    )

    response = await client.get(f"{API}/feature-flags")

    assert response.status_code == 200
