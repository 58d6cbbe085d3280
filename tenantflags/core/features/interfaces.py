"""
Feature Flag Interfaces - Core abstractions.

These define the contracts for feature flag implementations:
- FeatureStore: persistence of features and tenant overrides
- FeatureIdProvider: feature ids declared by the host application
- TenantStore: tenants known to the host application
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Feature:
    """
    Feature definition.

    Attributes:
        id: Unique identifier (e.g., "checkout-v2")
        enabled: Global default, used when a tenant has no override
    """
    id: str
    enabled: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class TenantFeatureState:
    """
    Tenant override for a feature.

    enabled=None means the tenant inherits the feature's global default.
    """
    tenant_id: str
    feature_id: str
    enabled: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_override(self) -> bool:
        return self.enabled is not None


@dataclass
class Tenant:
    id: str
    name: str | None = None


@dataclass
class EvaluationResult:
    """
    Result of resolving a feature for a tenant.

    Includes the decision and reason for debugging/logging.
    """
    enabled: bool
    reason: str
    feature_id: str
    tenant_id: str | None = None

    @classmethod
    def yes(cls, feature_id: str, reason: str, tenant_id: str | None = None) -> "EvaluationResult":
        return cls(enabled=True, reason=reason, feature_id=feature_id, tenant_id=tenant_id)

    @classmethod
    def no(cls, feature_id: str, reason: str, tenant_id: str | None = None) -> "EvaluationResult":
        return cls(enabled=False, reason=reason, feature_id=feature_id, tenant_id=tenant_id)


class FeatureStore(ABC):
    """
    Abstract store for features and tenant overrides.

    Implementations:
    - MemoryFeatureStore: In-memory (dev/testing)
    - DatabaseFeatureStore: SQLAlchemy (PostgreSQL, SQLite)

    Implementations raise StorageError on persistence faults.
    """

    @abstractmethod
    async def get_feature(self, feature_id: str) -> Feature | None:
        """Get a feature by id."""
        pass

    @abstractmethod
    async def list_features(self) -> list[Feature]:
        """List all features, ordered by id."""
        pass

    @abstractmethod
    async def create_feature_if_absent(self, feature: Feature) -> bool:
        """
        Insert a feature unless one with the same id exists.

        Must be atomic. Returns True if a record was inserted.
        """
        pass

    @abstractmethod
    async def update_feature_enabled(self, feature_id: str, enabled: bool) -> Feature | None:
        """Set the global default. Returns None if the feature is missing."""
        pass

    @abstractmethod
    async def get_tenant_state(self, tenant_id: str, feature_id: str) -> TenantFeatureState | None:
        """Get the override for a tenant and feature."""
        pass

    @abstractmethod
    async def list_tenant_states(self, feature_id: str) -> list[TenantFeatureState]:
        """List overrides recorded for a feature."""
        pass

    @abstractmethod
    async def upsert_tenant_state(
        self,
        tenant_id: str,
        feature_id: str,
        enabled: bool | None,
    ) -> TenantFeatureState:
        """Create or replace the override for a tenant (atomic)."""
        pass

    @abstractmethod
    async def delete_tenant_state(self, tenant_id: str, feature_id: str) -> bool:
        """Remove an override. Returns True if one existed."""
        pass


class FeatureIdProvider(ABC):
    """
    Source of the feature ids declared by the host application.

    get_feature_ids() is synchronous and must not raise: an implementation
    that does I/O handles its own failures and returns a best-effort list.
    """

    @abstractmethod
    def get_feature_ids(self) -> list[str]:
        pass


class DefaultFeatureIdProvider(FeatureIdProvider):
    """Declares nothing. Used when the host does not register a provider."""

    def get_feature_ids(self) -> list[str]:
        return []


class StaticFeatureIdProvider(FeatureIdProvider):
    """Declares a fixed list of ids (e.g. from FEATURE_DECLARED_IDS)."""

    def __init__(self, feature_ids: list[str]):
        self._feature_ids = list(feature_ids)

    def get_feature_ids(self) -> list[str]:
        return list(self._feature_ids)


class TenantStore(ABC):
    """
    Source of tenants known to the host application.

    The host supplies its own implementation (e.g. a tenancy directory).
    """

    @abstractmethod
    async def get_all_tenants(self) -> list[Tenant]:
        """List all tenants. May raise StorageError."""
        pass

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Find a tenant by id. Override for a cheaper lookup."""
        for tenant in await self.get_all_tenants():
            if tenant.id == tenant_id:
                return tenant
        return None


class EmptyTenantStore(TenantStore):
    """Knows no tenants. Used when the host does not register a store."""

    async def get_all_tenants(self) -> list[Tenant]:
        return []


class StaticTenantStore(TenantStore):
    """Fixed tenant list. Useful for testing and single-host setups."""

    def __init__(self, tenants: list[Tenant]):
        self._tenants = {tenant.id: tenant for tenant in tenants}

    async def get_all_tenants(self) -> list[Tenant]:
        return list(self._tenants.values())

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        return self._tenants.get(tenant_id)


class FeatureToggleServiceBase(ABC):
    """
    Abstract feature toggle service.

    This is the main entry point for the administrative surface.
    """

    @abstractmethod
    async def get_all_features(self) -> list[Feature]:
        pass

    @abstractmethod
    async def get_feature(self, feature_id: str) -> Feature:
        pass

    @abstractmethod
    async def get_tenant_states_by_feature(self, feature_id: str) -> list[TenantFeatureState]:
        pass

    @abstractmethod
    async def get_all_tenants(self) -> list[Tenant]:
        pass

    @abstractmethod
    async def get_available_feature_ids(self) -> list[str]:
        pass

    @abstractmethod
    async def update_feature(
        self,
        feature_id: str,
        enabled: bool,
        tenant_id: str | None = None,
    ) -> Feature | TenantFeatureState:
        pass

    @abstractmethod
    async def toggle_override(self, feature_id: str, tenant_id: str) -> bool:
        pass

    @abstractmethod
    async def bulk_create_missing(self) -> list[str]:
        pass
