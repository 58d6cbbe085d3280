"""
Dashboard access dependency.
"""

from fastapi import Depends, HTTPException, Request, status

from tenantflags.core.config import Settings
from tenantflags.core.container import Container

from .features import get_app_settings, get_container


async def require_dashboard_access(
    request: Request,
    container: Container = Depends(get_container),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """
    Gate the administrative API behind the registered AuthenticationProvider.

    Skipped when DASHBOARD_REQUIRE_AUTHENTICATION is false.

    Raises:
        HTTPException 401: Provider rejected the request
    """
    if not settings.dashboard.require_authentication:
        return

    if not await container.authentication_provider.authenticate(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
