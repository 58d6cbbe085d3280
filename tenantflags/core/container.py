"""
Dependency injection container.

Holds the pluggable pieces of the feature flag system and fills in
defaults for whatever the host application does not register.

Example:
```python
from tenantflags.core.container import Container
from tenantflags.main import create_app

container = (
    Container()
    .register_feature_id_provider(MyFeatureIds())
    .register_tenant_store(MyTenantDirectory())
)
app = create_app(container=container)
```
"""

from typing import Any
from dataclasses import dataclass, field

from tenantflags.models.database import Database

from .auth import AuthenticationProvider, JWTRoleAuthenticationProvider
from .config import Settings
from .features.interfaces import (
    DefaultFeatureIdProvider,
    EmptyTenantStore,
    FeatureIdProvider,
    StaticFeatureIdProvider,
    TenantStore,
)
from .features.backends.memory import MemoryFeatureStore


@dataclass
class Container:
    """
    Dependency injection container.

    register_* methods return the container so calls can be chained.
    Registered instances are kept as they are; every other slot is
    rebuilt from the settings on each configure().
    """

    _instances: dict[str, Any] = field(default_factory=dict)
    _registered: set[str] = field(default_factory=set)
    _settings: Settings | None = None

    def configure(self, settings: Settings) -> None:
        """Configure the container from settings."""
        self._settings = settings

        declared = settings.features.declared_ids
        self._set_default(
            "feature_id_provider",
            StaticFeatureIdProvider(declared) if declared else DefaultFeatureIdProvider(),
        )
        self._set_default("tenant_store", EmptyTenantStore())
        self._set_default(
            "authentication_provider",
            JWTRoleAuthenticationProvider(
                secret_key=settings.auth.secret_key,
                allowed_roles=settings.dashboard.allowed_roles,
                algorithm=settings.auth.algorithm,
                roles_claim=settings.auth.roles_claim,
            ),
        )

        # Built lazily, only database-backed apps need an engine
        if "database" not in self._registered:
            self._instances.pop("database", None)

    def _set_default(self, name: str, instance: Any) -> None:
        if name not in self._registered:
            self._instances[name] = instance

    # ============================================================
    # REGISTRATION
    # ============================================================

    def _register(self, name: str, instance: Any) -> "Container":
        self._instances[name] = instance
        self._registered.add(name)
        return self

    def register_feature_id_provider(self, provider: FeatureIdProvider) -> "Container":
        return self._register("feature_id_provider", provider)

    def register_tenant_store(self, store: TenantStore) -> "Container":
        return self._register("tenant_store", store)

    def register_authentication_provider(self, provider: AuthenticationProvider) -> "Container":
        return self._register("authentication_provider", provider)

    def register_memory_store(self, store: MemoryFeatureStore) -> "Container":
        return self._register("memory_store", store)

    def register_database(self, database: Database) -> "Container":
        return self._register("database", database)

    # ============================================================
    # ACCESS
    # ============================================================

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            raise RuntimeError("Container is not configured; call configure(settings) first")
        return self._settings

    @property
    def feature_id_provider(self) -> FeatureIdProvider:
        return self._instances.get("feature_id_provider") or DefaultFeatureIdProvider()

    @property
    def tenant_store(self) -> TenantStore:
        return self._instances.get("tenant_store") or EmptyTenantStore()

    @property
    def authentication_provider(self) -> AuthenticationProvider:
        return self._instances["authentication_provider"]

    @property
    def memory_store(self) -> MemoryFeatureStore:
        """Memory store shared by all requests (FEATURE_BACKEND=memory)."""
        if "memory_store" not in self._instances:
            self._instances["memory_store"] = MemoryFeatureStore()
        return self._instances["memory_store"]

    @property
    def database(self) -> Database:
        """Database built from the configured settings (FEATURE_BACKEND=database)."""
        if "database" not in self._instances:
            self._instances["database"] = Database.from_settings(self.settings.database)
        return self._instances["database"]


# Global container instance
container = Container()
