from .roles import UserRole, has_permission
from .dependencies import Actor, get_current_actor, require_role, require_reviewer, require_admin

__all__ = [
    "UserRole",
    "has_permission",
    "Actor",
    "get_current_actor",
    "require_role",
    "require_reviewer",
    "require_admin",
]
