"""
Feature Flag System.

Global defaults with per-tenant overrides, plus reconciliation of the
feature ids declared by the host application.

Resolution:
    tenant override (if recorded) -> feature global default

Usage:

Check a feature from a route:
    from tenantflags.api.dependencies import FeatureToggles

    @router.get("/dashboard")
    async def dashboard(toggles: FeatureToggles, tenant_id: str):
        if await toggles.is_enabled("dark-mode", tenant_id):
            return dark_dashboard()
        return dashboard()

Declare features so they are created on startup / bulk-create-missing:
    class AppFeatures(FeatureIdProvider):
        def get_feature_ids(self) -> list[str]:
            return ["checkout-v2", "dark-mode"]

    container.register_feature_id_provider(AppFeatures())
"""

from .exceptions import (
    FeatureFlagError,
    NotFoundError,
    StorageError,
    ValidationError,
)

from .interfaces import (
    Feature,
    TenantFeatureState,
    Tenant,
    EvaluationResult,
    FeatureStore,
    FeatureIdProvider,
    DefaultFeatureIdProvider,
    StaticFeatureIdProvider,
    TenantStore,
    EmptyTenantStore,
    StaticTenantStore,
    FeatureToggleServiceBase,
)

from .service import FeatureToggleService

from .backends import (
    DatabaseFeatureStore,
    MemoryFeatureStore,
)

__all__ = [
    # Errors
    "FeatureFlagError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    # Interfaces
    "Feature",
    "TenantFeatureState",
    "Tenant",
    "EvaluationResult",
    "FeatureStore",
    "FeatureIdProvider",
    "DefaultFeatureIdProvider",
    "StaticFeatureIdProvider",
    "TenantStore",
    "EmptyTenantStore",
    "StaticTenantStore",
    "FeatureToggleServiceBase",
    # Service
    "FeatureToggleService",
    # Stores
    "DatabaseFeatureStore",
    "MemoryFeatureStore",
]
