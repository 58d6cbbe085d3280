"""
Database store for feature flags.

Uses PostgreSQL (or SQLite for tests) for persistent storage. Insert-if-absent
and override upserts are single INSERT .. ON CONFLICT statements, so
concurrent callers cannot create duplicate rows.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import StorageError
from ..interfaces import Feature, FeatureStore, TenantFeatureState
from ..models import FeatureModel, TenantFeatureStateModel

logger = structlog.get_logger()

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("feature_store.failed", operation=operation, error=str(exc))
        raise StorageError(f"Feature store operation '{operation}' failed") from exc


class DatabaseFeatureStore(FeatureStore):
    """
    SQLAlchemy-backed feature storage.

    Works inside the caller's session: changes are flushed, and committing
    is left to the session owner (see models.database.Database.session).
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================================
    # FEATURE OPERATIONS
    # ============================================================

    async def get_feature(self, feature_id: str) -> Feature | None:
        with storage_errors("get_feature"):
            model = await self._get_feature_model(feature_id)

        if not model:
            return None

        return self._model_to_feature(model)

    async def list_features(self) -> list[Feature]:
        with storage_errors("list_features"):
            query = select(FeatureModel).order_by(FeatureModel.id)
            result = await self.db.execute(query)
            models = result.scalars().all()

        return [self._model_to_feature(m) for m in models]

    async def create_feature_if_absent(self, feature: Feature) -> bool:
        with storage_errors("create_feature_if_absent"):
            stmt = (
                self._insert(FeatureModel)
                .values(id=feature.id, enabled=feature.enabled)
                .on_conflict_do_nothing(index_elements=["id"])
            )
            result = await self.db.execute(stmt)
            await self.db.flush()

        return result.rowcount > 0

    async def update_feature_enabled(self, feature_id: str, enabled: bool) -> Feature | None:
        with storage_errors("update_feature_enabled"):
            model = await self._get_feature_model(feature_id)

            if not model:
                return None

            model.enabled = enabled
            await self.db.flush()
            await self.db.refresh(model)

        return self._model_to_feature(model)

    # ============================================================
    # OVERRIDE OPERATIONS
    # ============================================================

    async def get_tenant_state(self, tenant_id: str, feature_id: str) -> TenantFeatureState | None:
        with storage_errors("get_tenant_state"):
            model = await self._get_state_model(tenant_id, feature_id)

        if not model:
            return None

        return self._model_to_state(model)

    async def list_tenant_states(self, feature_id: str) -> list[TenantFeatureState]:
        with storage_errors("list_tenant_states"):
            query = (
                select(TenantFeatureStateModel)
                .where(TenantFeatureStateModel.feature_id == feature_id)
                .order_by(TenantFeatureStateModel.tenant_id)
            )
            result = await self.db.execute(query)
            models = result.scalars().all()

        return [self._model_to_state(m) for m in models]

    async def upsert_tenant_state(
        self,
        tenant_id: str,
        feature_id: str,
        enabled: bool | None,
    ) -> TenantFeatureState:
        with storage_errors("upsert_tenant_state"):
            stmt = self._insert(TenantFeatureStateModel).values(
                tenant_id=tenant_id,
                feature_id=feature_id,
                enabled=enabled,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["tenant_id", "feature_id"],
                set_={"enabled": stmt.excluded.enabled, "updated_at": func.now()},
            )
            await self.db.execute(stmt)
            await self.db.flush()

            model = await self._get_state_model(tenant_id, feature_id)

        return self._model_to_state(model)

    async def delete_tenant_state(self, tenant_id: str, feature_id: str) -> bool:
        with storage_errors("delete_tenant_state"):
            query = delete(TenantFeatureStateModel).where(
                TenantFeatureStateModel.tenant_id == tenant_id,
                TenantFeatureStateModel.feature_id == feature_id,
            )
            result = await self.db.execute(query)
            await self.db.flush()

        return result.rowcount > 0

    # ============================================================
    # HELPERS
    # ============================================================

    def _insert(self, model):
        """Dialect-specific INSERT on the model's table (Core, not ORM)."""
        dialect = self.db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise StorageError(f"Atomic upsert is not supported on '{dialect}'")
        return insert(model.__table__)

    async def _get_feature_model(self, feature_id: str) -> FeatureModel | None:
        query = select(FeatureModel).where(FeatureModel.id == feature_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_state_model(self, tenant_id: str, feature_id: str) -> TenantFeatureStateModel | None:
        # Core-level upserts bypass the identity map, so reload from the row.
        query = (
            select(TenantFeatureStateModel)
            .where(
                TenantFeatureStateModel.tenant_id == tenant_id,
                TenantFeatureStateModel.feature_id == feature_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def _model_to_feature(self, model: FeatureModel) -> Feature:
        """Convert SQLAlchemy model to dataclass."""
        return Feature(
            id=model.id,
            enabled=model.enabled,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _model_to_state(self, model: TenantFeatureStateModel) -> TenantFeatureState:
        return TenantFeatureState(
            tenant_id=model.tenant_id,
            feature_id=model.feature_id,
            enabled=model.enabled,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
