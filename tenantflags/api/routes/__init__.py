"""
Administrative API routes aggregation.

Mounted at {DASHBOARD_PATH}/api by create_app(). Every route, including
the fallback, sits behind require_dashboard_access.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from tenantflags.api.dependencies.auth import require_dashboard_access

from .feature_flags import router as feature_flags_router
from .tenants import router as tenants_router
from .management import router as management_router

router = APIRouter(dependencies=[Depends(require_dashboard_access)])

router.include_router(feature_flags_router, tags=["feature-flags"])
router.include_router(tenants_router, tags=["tenants"])
router.include_router(management_router, tags=["management"])


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def fallback(path: str):
    """Anything else under the API prefix is not found."""
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
