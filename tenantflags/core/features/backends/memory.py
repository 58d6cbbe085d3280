"""
In-memory store for feature flags.

For development and testing. Data is lost on restart.
"""

from dataclasses import replace
from datetime import datetime, timezone

from ..interfaces import Feature, FeatureStore, TenantFeatureState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryFeatureStore(FeatureStore):
    """
    In-memory feature storage.

    Useful for:
    - Development without database
    - Unit testing

    No method awaits between reading and writing, so each one runs
    atomically on the event loop. Records are copied on the way in and out.
    """

    def __init__(self):
        self._features: dict[str, Feature] = {}
        self._states: dict[tuple[str, str], TenantFeatureState] = {}

    # ============================================================
    # FEATURE OPERATIONS
    # ============================================================

    async def get_feature(self, feature_id: str) -> Feature | None:
        feature = self._features.get(feature_id)
        return replace(feature) if feature else None

    async def list_features(self) -> list[Feature]:
        return [replace(self._features[key]) for key in sorted(self._features)]

    async def create_feature_if_absent(self, feature: Feature) -> bool:
        if feature.id in self._features:
            return False

        now = _utcnow()
        self._features[feature.id] = replace(feature, created_at=now, updated_at=now)
        return True

    async def update_feature_enabled(self, feature_id: str, enabled: bool) -> Feature | None:
        feature = self._features.get(feature_id)
        if not feature:
            return None

        feature.enabled = enabled
        feature.updated_at = _utcnow()
        return replace(feature)

    # ============================================================
    # OVERRIDE OPERATIONS
    # ============================================================

    async def get_tenant_state(self, tenant_id: str, feature_id: str) -> TenantFeatureState | None:
        state = self._states.get((tenant_id, feature_id))
        return replace(state) if state else None

    async def list_tenant_states(self, feature_id: str) -> list[TenantFeatureState]:
        return [
            replace(state)
            for key, state in sorted(self._states.items())
            if key[1] == feature_id
        ]

    async def upsert_tenant_state(
        self,
        tenant_id: str,
        feature_id: str,
        enabled: bool | None,
    ) -> TenantFeatureState:
        now = _utcnow()
        existing = self._states.get((tenant_id, feature_id))

        state = TenantFeatureState(
            tenant_id=tenant_id,
            feature_id=feature_id,
            enabled=enabled,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self._states[(tenant_id, feature_id)] = state
        return replace(state)

    async def delete_tenant_state(self, tenant_id: str, feature_id: str) -> bool:
        return self._states.pop((tenant_id, feature_id), None) is not None

    # ============================================================
    # TEST HELPERS
    # ============================================================

    def clear(self) -> None:
        """Clear all data. Useful for testing."""
        self._features.clear()
        self._states.clear()

    def seed(
        self,
        features: list[Feature],
        states: list[TenantFeatureState] | None = None,
    ) -> None:
        """Seed with initial features and overrides. Useful for testing."""
        for feature in features:
            self._features[feature.id] = replace(feature)
        for state in states or []:
            self._states[(state.tenant_id, state.feature_id)] = replace(state)
