"""
Authentication providers.

JWTRoleAuthenticationProvider is the default when the host registers none:

    Authorization: Bearer <token signed with AUTH_SECRET_KEY>

    {"sub": "alice", "roles": ["Admin"]}

The token is accepted when one of its roles is in DASHBOARD_ALLOWED_ROLES.
"""

from typing import Iterable

import structlog
from jose import JWTError, jwt
from starlette.requests import Request

from .interfaces import AuthenticationProvider

logger = structlog.get_logger()


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


class JWTRoleAuthenticationProvider(AuthenticationProvider):
    """
    Validates a Bearer JWT and checks its roles claim.

    Args:
        secret_key: Key the token is signed with
        allowed_roles: Roles that may use the dashboard
        algorithm: JWT algorithm (default: HS256)
        roles_claim: Claim holding a role or list of roles
    """

    def __init__(
        self,
        secret_key: str,
        allowed_roles: Iterable[str],
        algorithm: str = "HS256",
        roles_claim: str = "roles",
    ):
        self.secret_key = secret_key
        self.allowed_roles = set(allowed_roles)
        self.algorithm = algorithm
        self.roles_claim = roles_claim

    async def authenticate(self, request: Request) -> bool:
        token = _bearer_token(request)
        if not token:
            return False

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.info("dashboard.token_rejected", error=str(exc))
            return False

        roles = payload.get(self.roles_claim) or []
        if isinstance(roles, str):
            roles = [roles]

        if not self.allowed_roles & set(roles):
            logger.info("dashboard.role_denied", subject=payload.get("sub"), roles=roles)
            return False

        return True


class AllowAllAuthenticationProvider(AuthenticationProvider):
    """Accepts every request. Only for local development and tests."""

    async def authenticate(self, request: Request) -> bool:
        return True
