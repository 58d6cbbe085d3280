"""
Authentication interfaces for the administrative surface.

The feature toggle service never sees these; access is gated at the
HTTP layer by api.dependencies.auth.require_dashboard_access.
"""

from abc import ABC, abstractmethod

from starlette.requests import Request


class AuthenticationProvider(ABC):
    """
    Decides whether a request may use the administrative surface.

    Implementations:
    - JWTRoleAuthenticationProvider: Bearer JWT with a roles claim (default)
    - AllowAllAuthenticationProvider: Accepts everything (development)
    """

    @abstractmethod
    async def authenticate(self, request: Request) -> bool:
        """Return True if the caller is allowed in."""
        pass
