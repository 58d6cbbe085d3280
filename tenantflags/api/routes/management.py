"""
Management routes of the administrative API.
"""

from fastapi import APIRouter

from tenantflags.api.dependencies.features import FeatureToggles
from tenantflags.schemas.feature import BulkCreateResponse

router = APIRouter()


@router.post("/management/bulk-create-missing", response_model=BulkCreateResponse)
async def bulk_create_missing(toggles: FeatureToggles):
    """Create a stored feature for every declared id that lacks one."""
    created = await toggles.bulk_create_missing()
    return BulkCreateResponse(created=created)
