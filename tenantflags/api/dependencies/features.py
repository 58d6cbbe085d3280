"""
FastAPI dependencies for feature flags.

Usage:
    from tenantflags.api.dependencies.features import FeatureToggles, require_feature

    @router.get("/checkout")
    async def checkout(toggles: FeatureToggles, tenant_id: str):
        if await toggles.is_enabled("checkout-v2", tenant_id):
            return new_checkout()
        return old_checkout()

    @router.get("/beta", dependencies=[Depends(require_feature("beta"))])
    async def beta():
        ...
"""

from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator

from fastapi import Depends, Header, HTTPException, Request, status

from tenantflags.core.config import Settings
from tenantflags.core.container import Container
from tenantflags.core.features.interfaces import FeatureStore
from tenantflags.core.features.service import FeatureToggleService
from tenantflags.core.features.backends.database import DatabaseFeatureStore


# ============================================================
# APP-SCOPED OBJECTS
# ============================================================

def get_container(request: Request) -> Container:
    """Container configured by create_app()."""
    return request.app.state.container


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# ============================================================
# STORE FACTORY
# ============================================================

async def get_feature_store(
    container: Container = Depends(get_container),
    settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[FeatureStore]:
    """
    Get feature store based on configuration.

    Uses FEATURE_BACKEND setting:
    - "database": one session per request, committed when the endpoint
      succeeds (default, production)
    - "memory": Process-wide in-memory store (development/testing)
    """
    if settings.features.backend == "memory":
        yield container.memory_store
        return

    async with container.database.session() as session:
        yield DatabaseFeatureStore(session)


def build_feature_toggle_service(
    store: FeatureStore,
    container: Container,
    settings: Settings,
) -> FeatureToggleService:
    return FeatureToggleService(
        store,
        feature_id_provider=container.feature_id_provider,
        tenant_store=container.tenant_store,
        default_enabled=settings.features.default_enabled,
    )


# ============================================================
# FEATURE SERVICE DEPENDENCY
# ============================================================

async def get_feature_toggle_service(
    # Function scope: the commit runs before the response is sent
    store: FeatureStore = Depends(get_feature_store, scope="function"),
    container: Container = Depends(get_container),
    settings: Settings = Depends(get_app_settings),
) -> FeatureToggleService:
    """Get feature toggle service instance."""
    return build_feature_toggle_service(store, container, settings)


# Type alias for cleaner injection
FeatureToggles = Annotated[FeatureToggleService, Depends(get_feature_toggle_service)]


@asynccontextmanager
async def feature_toggle_service_scope(
    container: Container,
    settings: Settings,
) -> AsyncIterator[FeatureToggleService]:
    """
    Service outside of a request (startup tasks, scripts).

    The database session is committed when the block exits cleanly.
    """
    if settings.features.backend == "memory":
        yield build_feature_toggle_service(container.memory_store, container, settings)
        return

    async with container.database.session() as session:
        yield build_feature_toggle_service(DatabaseFeatureStore(session), container, settings)


# ============================================================
# ROUTE GUARD
# ============================================================

def require_feature(
    feature_id: str,
    *,
    status_code: int = status.HTTP_404_NOT_FOUND,
    detail: str | None = None,
):
    """
    Dependency factory that rejects requests when a feature is off.

    The tenant is taken from the X-Tenant-ID header; without it the
    global default decides.

    Usage:
        @router.get("/beta", dependencies=[Depends(require_feature("beta"))])
        async def beta_endpoint():
            ...
    """
    async def dependency(
        toggles: FeatureToggles,
        tenant_id: Annotated[str | None, Header(alias="X-Tenant-ID")] = None,
    ) -> None:
        if not await toggles.is_enabled(feature_id, tenant_id):
            raise HTTPException(
                status_code=status_code,
                detail=detail or f"Feature '{feature_id}' is not available",
            )

    return dependency
