# billdesk/core/access.py
"""
Access gate.

The decision itself is a pure function of the request's claims and the
permitted-role set, so it can be exercised without an identity provider.
`enforce` and `guard` turn a decision into the 401/403 errors returned at the
request boundary.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from billdesk.core.exceptions import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IdentityClaims(BaseModel):
    sub: str
    role: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(extra="allow")


@dataclass(frozen=True)
class RequestContext:
    claims: Optional[IdentityClaims]
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def actor_id(self) -> Optional[str]:
        return self.claims.sub if self.claims else None


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def _role_values(allowed_roles: Iterable) -> set[str]:
    return {getattr(role, "value", role) for role in allowed_roles}


def decide(claims: Optional[IdentityClaims], allowed_roles: Iterable) -> AccessDecision:
    if claims is None:
        return AccessDecision.UNAUTHENTICATED
    if claims.role is None or claims.role not in _role_values(allowed_roles):
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOW


def enforce(claims: Optional[IdentityClaims], allowed_roles: Iterable) -> IdentityClaims:
    allowed = _role_values(allowed_roles)
    decision = decide(claims, allowed)

    if decision is AccessDecision.UNAUTHENTICATED:
        raise Unauthorized()

    if decision is AccessDecision.FORBIDDEN:
        logger.warning("Denied role %r for subject %s", claims.role, claims.sub)
        raise Forbidden(
            f"Role '{claims.role}' not authorized. Required: {sorted(allowed)}"
        )

    return claims


def guard(
    claims: Optional[IdentityClaims],
    allowed_roles: Iterable,
    operation: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Run `operation` only if the claims pass the gate; return its result as is.

    Library form of the gate for callers outside a request (jobs, scripts).
    HTTP routes go through `require_roles`, which applies the same `enforce`
    as a FastAPI dependency so the check runs before body validation.
    """
    enforce(claims, allowed_roles)
    return operation(*args, **kwargs)
