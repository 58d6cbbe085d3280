"""
FastAPI dependencies.
"""

from .auth import require_dashboard_access
from .features import (
    FeatureToggles,
    feature_toggle_service_scope,
    get_feature_store,
    get_feature_toggle_service,
    require_feature,
)

__all__ = [
    "FeatureToggles",
    "feature_toggle_service_scope",
    "get_feature_store",
    "get_feature_toggle_service",
    "require_dashboard_access",
    "require_feature",
]
