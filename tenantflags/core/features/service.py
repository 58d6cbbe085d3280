"""
Feature Toggle Service - Resolution, overrides and reconciliation.

Effective enablement for (tenant, feature):
1. Tenant override, if one is recorded
2. Feature global default

The service holds no state of its own; everything lives in the FeatureStore.
"""

import structlog

from .exceptions import NotFoundError, ValidationError
from .interfaces import (
    EvaluationResult,
    Feature,
    FeatureIdProvider,
    FeatureStore,
    FeatureToggleServiceBase,
    DefaultFeatureIdProvider,
    EmptyTenantStore,
    Tenant,
    TenantFeatureState,
    TenantStore,
)

logger = structlog.get_logger()

MAX_ID_LENGTH = 100


def validate_id(value: str | None, field: str) -> str:
    """Reject empty or oversized identifiers."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    if len(value) > MAX_ID_LENGTH:
        raise ValidationError(f"{field} must be at most {MAX_ID_LENGTH} characters")
    return value


class FeatureToggleService(FeatureToggleServiceBase):
    """
    Feature toggle orchestration over a FeatureStore.

    Args:
        store: Persistence for features and overrides
        feature_id_provider: Ids declared by the host (default: none)
        tenant_store: Tenants known to the host (default: none)
        default_enabled: Global default for features created by reconciliation
    """

    def __init__(
        self,
        store: FeatureStore,
        feature_id_provider: FeatureIdProvider | None = None,
        tenant_store: TenantStore | None = None,
        default_enabled: bool = False,
    ):
        self.store = store
        self.feature_id_provider = feature_id_provider or DefaultFeatureIdProvider()
        self.tenant_store = tenant_store or EmptyTenantStore()
        self.default_enabled = default_enabled

    # ============================================================
    # QUERIES
    # ============================================================

    async def get_all_features(self) -> list[Feature]:
        return await self.store.list_features()

    async def get_feature(self, feature_id: str) -> Feature:
        """
        Get a feature by id.

        Raises:
            NotFoundError: If the feature is not stored
        """
        validate_id(feature_id, "feature_id")
        feature = await self.store.get_feature(feature_id)
        if feature is None:
            raise NotFoundError.feature(feature_id)
        return feature

    async def get_tenant_states_by_feature(self, feature_id: str) -> list[TenantFeatureState]:
        """List recorded overrides. Tenants without one are not included."""
        validate_id(feature_id, "feature_id")
        return await self.store.list_tenant_states(feature_id)

    async def get_all_tenants(self) -> list[Tenant]:
        return await self.tenant_store.get_all_tenants()

    async def get_available_feature_ids(self) -> list[str]:
        """
        Ids declared by the FeatureIdProvider that are not stored yet.

        Declaration order is kept; duplicates and blank ids are dropped.
        """
        stored = {feature.id for feature in await self.store.list_features()}
        available: list[str] = []
        seen: set[str] = set()

        for feature_id in self.feature_id_provider.get_feature_ids():
            if not feature_id or not feature_id.strip() or len(feature_id) > MAX_ID_LENGTH:
                logger.warning("feature_id.invalid_declaration", feature_id=feature_id)
                continue
            if feature_id in stored or feature_id in seen:
                continue
            seen.add(feature_id)
            available.append(feature_id)

        return available

    # ============================================================
    # EVALUATION
    # ============================================================

    async def evaluate(self, feature_id: str, tenant_id: str | None = None) -> EvaluationResult:
        """
        Resolve effective enablement with the reason for the decision.

        An unknown feature resolves to disabled with reason "Feature not found".
        """
        validate_id(feature_id, "feature_id")

        feature = await self.store.get_feature(feature_id)
        if feature is None:
            return EvaluationResult.no(feature_id, "Feature not found", tenant_id)

        if tenant_id:
            state = await self.store.get_tenant_state(tenant_id, feature_id)
            if state is not None and state.is_override:
                return EvaluationResult(
                    enabled=state.enabled,
                    reason="Tenant override",
                    feature_id=feature_id,
                    tenant_id=tenant_id,
                )

        if feature.enabled:
            return EvaluationResult.yes(feature_id, "Enabled globally", tenant_id)
        return EvaluationResult.no(feature_id, "Disabled globally", tenant_id)

    async def is_enabled(
        self,
        feature_id: str,
        tenant_id: str | None = None,
        default: bool | None = None,
    ) -> bool:
        """
        Check if a feature is enabled for a tenant (or globally).

        Args:
            feature_id: Feature id
            tenant_id: Tenant to resolve overrides for (optional)
            default: Returned if the feature doesn't exist
        """
        result = await self.evaluate(feature_id, tenant_id)
        if result.reason == "Feature not found":
            return default if default is not None else self.default_enabled
        return result.enabled

    # ============================================================
    # MUTATIONS
    # ============================================================

    async def update_feature(
        self,
        feature_id: str,
        enabled: bool,
        tenant_id: str | None = None,
    ) -> Feature | TenantFeatureState:
        """
        Update global or tenant-scoped enablement.

        Without tenant_id the feature's global default is set. With tenant_id
        the tenant's override is created or replaced; both the feature and the
        tenant must exist, otherwise nothing is written.

        Raises:
            NotFoundError: Feature or tenant doesn't exist
            ValidationError: Empty identifiers
        """
        validate_id(feature_id, "feature_id")

        if tenant_id is None:
            feature = await self.store.update_feature_enabled(feature_id, enabled)
            if feature is None:
                raise NotFoundError.feature(feature_id)
            logger.info("feature.updated", feature_id=feature_id, enabled=enabled)
            return feature

        validate_id(tenant_id, "tenant_id")

        if await self.store.get_feature(feature_id) is None:
            raise NotFoundError.feature(feature_id)
        if await self.tenant_store.get_tenant(tenant_id) is None:
            raise NotFoundError.tenant(tenant_id)

        state = await self.store.upsert_tenant_state(tenant_id, feature_id, enabled)
        logger.info(
            "feature.override_set",
            feature_id=feature_id,
            tenant_id=tenant_id,
            enabled=enabled,
        )
        return state

    async def toggle_override(self, feature_id: str, tenant_id: str) -> bool:
        """
        Remove a tenant's override, reverting it to the global default.

        Delete-only: a missing override is a no-op, not an error, and no
        override is ever created here.

        Returns:
            True if an override was removed
        """
        validate_id(feature_id, "feature_id")
        validate_id(tenant_id, "tenant_id")

        removed = await self.store.delete_tenant_state(tenant_id, feature_id)
        if removed:
            logger.info("feature.override_removed", feature_id=feature_id, tenant_id=tenant_id)
        return removed

    async def bulk_create_missing(self) -> list[str]:
        """
        Create a feature for every declared id that is not stored yet.

        Idempotent: a second call finds nothing missing. Uses the store's
        insert-if-absent, so concurrent calls never duplicate a feature.

        Returns:
            Ids that were actually inserted by this call
        """
        created: list[str] = []

        for feature_id in await self.get_available_feature_ids():
            inserted = await self.store.create_feature_if_absent(
                Feature(id=feature_id, enabled=self.default_enabled)
            )
            if inserted:
                created.append(feature_id)

        if created:
            logger.info("features.bulk_created", count=len(created), feature_ids=created)
        return created
