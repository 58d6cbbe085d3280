"""
Dashboard authentication.

Usage:
    from tenantflags.core.auth import AuthenticationProvider

    class HeaderKeyProvider(AuthenticationProvider):
        async def authenticate(self, request):
            return request.headers.get("X-Admin-Key") == "secret"

    container.register_authentication_provider(HeaderKeyProvider())
"""

from .interfaces import AuthenticationProvider
from .providers import AllowAllAuthenticationProvider, JWTRoleAuthenticationProvider

__all__ = [
    "AuthenticationProvider",
    "AllowAllAuthenticationProvider",
    "JWTRoleAuthenticationProvider",
]
