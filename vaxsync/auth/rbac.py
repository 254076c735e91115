"""
RBAC permission table per role.
Maps which actions each health-unit role may perform.
"""

import enum


class UserRole(str, enum.Enum):
    HEAD_NURSE = "Head Nurse"
    PUBLIC_HEALTH_NURSE = "Public Health Nurse"
    RURAL_HEALTH_MIDWIFE = "Rural Health Midwife"
    HEALTH_WORKER = "Health Worker"


_ALL_ROLES = list(UserRole)
_SUPERVISORS = [
    UserRole.HEAD_NURSE,
    UserRole.PUBLIC_HEALTH_NURSE,
    UserRole.RURAL_HEALTH_MIDWIFE,
]

# ── Permissions per resource ─────────────────────────
# Format: {resource: {action: [allowed roles]}}
PERMISSIONS: dict[str, dict[str, list[UserRole]]] = {
    "catalog": {
        "create": [UserRole.HEAD_NURSE],
        "read": _ALL_ROLES,
    },
    "inventory": {
        "create": [UserRole.HEAD_NURSE, UserRole.RURAL_HEALTH_MIDWIFE],
        "read": _ALL_ROLES,
        "deduct": _ALL_ROLES,
        "recalculate": _SUPERVISORS,
    },
    "session": {
        "create": [UserRole.HEAD_NURSE, UserRole.PUBLIC_HEALTH_NURSE, UserRole.HEALTH_WORKER],
        "read": _ALL_ROLES,
        "update": _ALL_ROLES,
    },
    "report": {
        "read": _SUPERVISORS,
    },
}


def has_permission(role: UserRole, resource: str, action: str) -> bool:
    """Whether a role may perform an action on a resource."""
    resource_perms = PERMISSIONS.get(resource, {})
    allowed_roles = resource_perms.get(action, [])
    return role in allowed_roles
