"""User roles and permission hierarchy for the moderation backend.

Role Hierarchy (descending permissions):
- ADMIN: Review decisions plus retention configuration
- REVIEWER: Review decisions, queue and stats
- USER: Submit images for review

Permission Matrix:
┌──────────────────────┬───────┬──────────┬──────┐
│ Action               │ ADMIN │ REVIEWER │ USER │
├──────────────────────┼───────┼──────────┼──────┤
│ Submit Images        │   ✓   │    ✓     │  ✓   │
│ Review Submissions   │   ✓   │    ✓     │      │
│ Run / Tune Retention │   ✓   │          │      │
└──────────────────────┴───────┴──────────┴──────┘
"""

from enum import Enum
from typing import Set


class UserRole(str, Enum):
    """Roles asserted by the upstream gateway in X-User-Role"""
    ADMIN = "admin"
    REVIEWER = "reviewer"
    USER = "user"


# Role hierarchy: Each role includes permissions of all roles below it
ROLE_HIERARCHY = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.REVIEWER, UserRole.USER},
    UserRole.REVIEWER: {UserRole.REVIEWER, UserRole.USER},
    UserRole.USER: {UserRole.USER},
}


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a user role satisfies a required role.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.REVIEWER)
        True
        >>> has_permission(UserRole.USER, UserRole.REVIEWER)
        False
    """
    return required_role in ROLE_HIERARCHY.get(user_role, set())


def get_allowed_roles(required_role: UserRole) -> Set[UserRole]:
    """Get all roles that satisfy a required role."""
    return {role for role, permissions in ROLE_HIERARCHY.items() if required_role in permissions}
