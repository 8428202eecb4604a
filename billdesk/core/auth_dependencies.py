# billdesk/core/auth_dependencies.py
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError
from typing import Iterable, Optional

from billdesk.core.access import IdentityClaims, RequestContext, enforce
from billdesk.core.config import settings
from billdesk.core.permissions import Permissions, roles_for
from billdesk.core.security import SecurityUtils


security = HTTPBearer(auto_error=False)


def get_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[IdentityClaims]:
    if not credentials:
        return None

    payload = SecurityUtils.verify_identity_token(credentials.credentials)
    if not payload:
        return None

    payload = dict(payload)
    # a role that is not a plain string counts as no role
    role = payload.get(settings.ROLE_CLAIM)
    payload["role"] = role if isinstance(role, str) else None
    if not isinstance(payload.get("email"), str):
        payload.pop("email", None)
    try:
        return IdentityClaims(**payload)
    except ValidationError:
        # missing or non-string subject
        return None


def get_request_context(
    request: Request,
    claims: Optional[IdentityClaims] = Depends(get_claims),
) -> RequestContext:
    return RequestContext(
        claims=claims,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def require_roles(allowed_roles: Iterable):
    """
    Dependency factory guarding a route by role.

    Examples:
    - require_roles([Role.ADMIN])
    - require_roles([Role.ADMIN, Role.ACCOUNTS])
    """
    allowed = frozenset(allowed_roles)

    def role_checker(context: RequestContext = Depends(get_request_context)) -> RequestContext:
        enforce(context.claims, allowed)
        return context

    return role_checker


def require_permission(required_permission: Permissions):
    return require_roles(roles_for(required_permission))
