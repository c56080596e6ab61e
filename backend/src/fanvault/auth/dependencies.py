"""FastAPI dependencies for caller identity and authorization.

Authentication happens upstream: the API gateway validates the session and
forwards the caller's identity as X-User-Id and X-User-Role headers. This
module only parses those headers and enforces role requirements.

Usage:
    @router.get("/review/stats")
    def stats(actor: Actor = Depends(require_role(UserRole.REVIEWER))):
        ...
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from .roles import UserRole, has_permission


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as asserted by the gateway"""
    user_id: int
    role: UserRole


def get_current_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    """Parse caller identity from gateway headers.

    Raises:
        HTTPException 401: If identity headers are missing or malformed
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid X-User-Id header: {x_user_id}",
        )

    try:
        role = UserRole((x_user_role or UserRole.USER.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid X-User-Role header: {x_user_role}",
        )

    return Actor(user_id=user_id, role=role)


def require_role(required_role: UserRole) -> Callable:
    """Create a dependency that enforces role-based access control.

    Args:
        required_role: Minimum role required to access the endpoint

    Returns:
        Callable: FastAPI dependency returning the authorized Actor

    Raises:
        HTTPException 403: If the caller's role is insufficient
    """

    def role_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_permission(actor.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_role.value}",
            )
        return actor

    return role_dependency


def require_reviewer(actor: Actor = Depends(require_role(UserRole.REVIEWER))) -> Actor:
    """Convenience dependency for review endpoints (reviewer or admin)."""
    return actor


def require_admin(actor: Actor = Depends(require_role(UserRole.ADMIN))) -> Actor:
    """Convenience dependency for retention administration."""
    return actor
