"""Admin roles and what each of them may do.

chief    - everything, across every college, including managing admins and colleges
admin    - legacy flat moderator role, every college, no account management
college  - moderates confessions, comments and direct messages of its own college
normal   - moderates confessions and comments of its own college
"""

from enum import Enum
from typing import Optional

from fastapi import HTTPException

from models import User


class Role(str, Enum):
    chief = "chief"
    admin = "admin"
    college = "college"
    normal = "normal"


class Capability(str, Enum):
    moderate_confessions = "moderate_confessions"
    moderate_comments = "moderate_comments"
    moderate_direct_messages = "moderate_direct_messages"
    manage_admins = "manage_admins"
    manage_colleges = "manage_colleges"


_MODERATION = {
    Capability.moderate_confessions,
    Capability.moderate_comments,
    Capability.moderate_direct_messages,
}

CAPABILITIES: dict[Role, set[Capability]] = {
    Role.chief: _MODERATION | {Capability.manage_admins, Capability.manage_colleges},
    Role.admin: set(_MODERATION),
    Role.college: set(_MODERATION),
    Role.normal: {Capability.moderate_confessions, Capability.moderate_comments},
}

GLOBAL_ROLES = {Role.chief, Role.admin}
COLLEGE_ROLES = {Role.college, Role.normal}


def user_role(user: User) -> Optional[Role]:
    try:
        return Role(user.role)
    except ValueError:
        return None


def has_capability(user: User, capability: Capability) -> bool:
    role = user_role(user)
    if role is None or user.status != "active":
        return False
    return capability in CAPABILITIES[role]


def require_capability(user: User, capability: Capability) -> None:
    """Raise 403 unless the user is an active admin holding the capability"""
    if user.status != "active":
        raise HTTPException(status_code=403, detail="Admin account is inactive")
    if not has_capability(user, capability):
        raise HTTPException(status_code=403, detail="Admin access required")


def college_scope(user: User) -> Optional[str]:
    """College the admin is limited to, or None for the global roles"""
    if user_role(user) in GLOBAL_ROLES:
        return None
    # A college role without a college sees nothing rather than everything
    return user.college_code or ""


def ensure_in_scope(user: User, college_code: Optional[str]) -> None:
    scope = college_scope(user)
    if scope is not None and college_code != scope:
        raise HTTPException(status_code=403, detail="Outside your college")
