"""
Feature Flag Models - SQLAlchemy models for feature flags.

Tables:
- features: Feature definitions with their global default
- tenant_feature_states: Per-tenant overrides
"""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tenantflags.models.base import Base, TimestampMixin


class FeatureModel(Base, TimestampMixin):
    """
    Feature definition.

    The id is the identifier declared by the host application.
    """

    __tablename__ = "features"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)

    # Global default
    enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        status = "ON" if self.enabled else "OFF"
        return f"<Feature {self.id} [{status}]>"


class TenantFeatureStateModel(Base, TimestampMixin):
    """
    Tenant override for a feature.

    The composite primary key allows at most one override per
    (tenant_id, feature_id). enabled=NULL means "inherit global default".
    Tenants live outside this database, so tenant_id is not a foreign key.
    """

    __tablename__ = "tenant_feature_states"
    __table_args__ = (
        Index("idx_tenant_feature_states_feature", "feature_id"),
    )

    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    feature_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("features.id", ondelete="CASCADE"),
        primary_key=True,
    )
    enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    def __repr__(self) -> str:
        if self.enabled is None:
            status = "INHERIT"
        else:
            status = "ON" if self.enabled else "OFF"
        return f"<TenantFeatureState {self.feature_id}={status} for {self.tenant_id}>"
