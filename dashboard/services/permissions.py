"""Role-based permission checks."""

from typing import List

from dashboard.config.roles import ROLE_HIERARCHY, ROLE_PERMISSIONS, Permission, UserRole
from dashboard.services.exceptions import PermissionDenied


def has_permission(role: UserRole, permission: Permission) -> bool:
    return Permission(permission) in ROLE_PERMISSIONS.get(UserRole(role), [])


def check_permission(role: UserRole, permission: Permission) -> None:
    """
    Raises:
        PermissionDenied: If the role lacks the permission
    """
    if not has_permission(role, permission):
        raise PermissionDenied(
            f"User with role {UserRole(role).value} does not have permission: "
            f"{Permission(permission).value}"
        )


def get_user_permissions(role: UserRole) -> List[Permission]:
    return list(ROLE_PERMISSIONS.get(UserRole(role), []))


def can_manage_role(manager_role: UserRole, target_role: UserRole) -> bool:
    """Admins manage every role; anyone else only roles strictly below their own."""
    manager_role = UserRole(manager_role)
    if manager_role == UserRole.ADMIN:
        return True
    return ROLE_HIERARCHY.index(manager_role) > ROLE_HIERARCHY.index(UserRole(target_role))
