"""Static capability table keyed by role.

Both the navigation endpoint and the services consult this table, so a
permission is granted or denied in one place.
"""

from __future__ import annotations

from enum import Enum

from .enums import Role
from .exceptions import AuthorizationError


class Capability(str, Enum):
    SUBMIT_LEAVE = "submit_leave"
    VIEW_HISTORY = "view_history"
    REVIEW_LEAVES = "review_leaves"
    ENROLL_USERS = "enroll_users"
    MANAGE_EMPLOYEES = "manage_employees"
    MANAGE_PASSWORDS = "manage_passwords"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    # Approval authority comes from reporting_to, so any user may review.
    Role.EMPLOYEE: frozenset(
        {
            Capability.SUBMIT_LEAVE,
            Capability.VIEW_HISTORY,
            Capability.REVIEW_LEAVES,
        }
    ),
}

# (capability, path, label) in menu order
NAVIGATION: tuple[tuple[Capability, str, str], ...] = (
    (Capability.SUBMIT_LEAVE, "/dashboard", "Dashboard"),
    (Capability.VIEW_HISTORY, "/leaves", "Leave History"),
    (Capability.REVIEW_LEAVES, "/approvals", "Pending Approvals"),
    (Capability.ENROLL_USERS, "/admin/users", "Enroll User"),
    (Capability.MANAGE_EMPLOYEES, "/admin/users/settings", "Employee Management"),
    (Capability.MANAGE_PASSWORDS, "/admin/users/password", "Password Management"),
)


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(Role(role), frozenset())


def require_capability(role: Role, capability: Capability) -> None:
    if not has_capability(role, capability):
        raise AuthorizationError("You do not have permission to perform this action")


def menu_for(role: Role) -> list[dict]:
    return [
        {"path": path, "label": label, "capability": cap.value}
        for cap, path, label in NAVIGATION
        if has_capability(role, cap)
    ]
