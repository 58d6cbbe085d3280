"""
SQLAlchemy base classes.

Feature tables live in tenantflags.core.features.models.
"""

from .base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
]
