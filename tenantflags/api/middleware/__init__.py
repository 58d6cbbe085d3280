"""
API middleware.
"""

from .logging import LoggingMiddleware
from .request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "LoggingMiddleware",
    "RequestIdMiddleware",
    "get_request_id",
]
