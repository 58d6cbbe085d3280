"""
Tenant-aware feature flags for FastAPI applications.
"""

__version__ = "0.1.0"
