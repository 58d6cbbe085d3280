"""
Feature flag routes of the administrative API.
"""

from fastapi import APIRouter, Query

from tenantflags.api.dependencies.features import FeatureToggles
from tenantflags.core.features import Feature, FeatureToggleService
from tenantflags.schemas.feature import (
    EvaluationResponse,
    FeatureResponse,
    FeatureStateResponse,
    TenantFeatureStateResponse,
)

router = APIRouter()


async def _feature_state(service: FeatureToggleService, feature: Feature) -> FeatureStateResponse:
    states = await service.get_tenant_states_by_feature(feature.id)
    return FeatureStateResponse(
        feature=FeatureResponse.model_validate(feature),
        tenant_states=[TenantFeatureStateResponse.model_validate(s) for s in states],
    )


@router.get("/feature-flags", response_model=list[FeatureStateResponse])
async def list_feature_flags(toggles: FeatureToggles):
    """List all features with their tenant overrides."""
    features = await toggles.get_all_features()
    return [await _feature_state(toggles, feature) for feature in features]


@router.get("/feature-flags/{feature_id}", response_model=FeatureStateResponse)
async def get_feature_flag(feature_id: str, toggles: FeatureToggles):
    """Get a single feature with its tenant overrides. 404 if absent."""
    feature = await toggles.get_feature(feature_id)
    return await _feature_state(toggles, feature)


@router.get("/feature-flags/{feature_id}/evaluate", response_model=EvaluationResponse)
async def evaluate_feature_flag(
    feature_id: str,
    toggles: FeatureToggles,
    tenant_id: str | None = Query(None, alias="tenantId"),
):
    """Resolve effective enablement for a tenant, with the reason."""
    result = await toggles.evaluate(feature_id, tenant_id)
    return EvaluationResponse.model_validate(result)


@router.patch("/feature-flags/{feature_id}", response_model=FeatureStateResponse)
async def update_feature_flag(
    feature_id: str,
    toggles: FeatureToggles,
    enabled: bool = Query(...),
    tenant_id: str | None = Query(None, alias="tenantId"),
):
    """
    Update enablement.

    Without tenantId the global default changes; with tenantId the
    tenant's override is created or replaced.
    """
    await toggles.update_feature(feature_id, enabled, tenant_id)
    feature = await toggles.get_feature(feature_id)
    return await _feature_state(toggles, feature)


@router.get("/available-ids", response_model=list[str])
async def list_available_ids(toggles: FeatureToggles):
    """Ids declared by the host that have no stored feature yet."""
    return await toggles.get_available_feature_ids()
