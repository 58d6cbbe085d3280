"""
Feature flag schemas.

Responses use camelCase keys (featureId, tenantStates, ...).
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FeatureResponse(CamelModel):
    """Feature response schema."""
    id: str
    enabled: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TenantFeatureStateResponse(CamelModel):
    """Tenant override response schema."""
    tenant_id: str
    feature_id: str
    enabled: bool | None = None
    updated_at: datetime | None = None


class FeatureStateResponse(CamelModel):
    """A feature together with its tenant overrides."""
    feature: FeatureResponse
    tenant_states: list[TenantFeatureStateResponse]


class TenantResponse(CamelModel):
    id: str
    name: str | None = None


class EvaluationResponse(CamelModel):
    feature_id: str
    tenant_id: str | None = None
    enabled: bool
    reason: str


class BulkCreateResponse(CamelModel):
    created: list[str]
