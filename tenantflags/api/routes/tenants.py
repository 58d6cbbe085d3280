"""
Tenant routes of the administrative API.
"""

from fastapi import APIRouter, Response, status

from tenantflags.api.dependencies.features import FeatureToggles
from tenantflags.schemas.feature import TenantResponse

router = APIRouter()


@router.get("/tenants", response_model=list[TenantResponse])
async def list_tenants(toggles: FeatureToggles):
    """List tenants known to the host's tenant store."""
    tenants = await toggles.get_all_tenants()
    return [TenantResponse.model_validate(t) for t in tenants]


@router.delete(
    "/tenants/{tenant_id}/overrides/{feature_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_tenant_override(tenant_id: str, feature_id: str, toggles: FeatureToggles):
    """
    Remove a tenant's override so it follows the global default again.

    Succeeds whether or not an override existed.
    """
    await toggles.toggle_override(feature_id, tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
