"""
API schemas.
"""

from .feature import (
    BulkCreateResponse,
    EvaluationResponse,
    FeatureResponse,
    FeatureStateResponse,
    TenantFeatureStateResponse,
    TenantResponse,
)

__all__ = [
    "BulkCreateResponse",
    "EvaluationResponse",
    "FeatureResponse",
    "FeatureStateResponse",
    "TenantFeatureStateResponse",
    "TenantResponse",
]
