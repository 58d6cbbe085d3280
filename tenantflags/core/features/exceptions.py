"""
Feature flag errors.

- NotFoundError: requested feature, tenant or override does not exist
- ValidationError: malformed input, rejected before touching storage
- StorageError: the underlying store failed
"""


class FeatureFlagError(Exception):
    """Base class for feature flag errors."""

    code = "feature_flag_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FeatureFlagError):
    """A feature, tenant or override lookup missed."""

    code = "not_found"

    @classmethod
    def feature(cls, feature_id: str) -> "NotFoundError":
        return cls(f"Feature '{feature_id}' not found")

    @classmethod
    def tenant(cls, tenant_id: str) -> "NotFoundError":
        return cls(f"Tenant '{tenant_id}' not found")


class ValidationError(FeatureFlagError):
    code = "validation_error"


class StorageError(FeatureFlagError):
    """Persistence fault. Not retried here; retry policy belongs to the store."""

    code = "storage_error"
