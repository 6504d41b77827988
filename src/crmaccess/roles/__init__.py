"""Role registry: built-in system roles and tenant custom roles."""

from .models import CustomRole, CustomRoleDraft, CustomRoleUpdate, Role, SystemRole
from .registry import (
    ROLE_ALIASES,
    ROLE_HIERARCHY,
    SYSTEM_ROLES,
    create_custom_role,
    deactivate_custom_role,
    get_system_role,
    is_system_role_id,
    list_roles,
    list_system_roles,
    meets_minimum_role,
    resolve_role_permissions,
    role_rank,
    update_custom_role,
)

__all__ = [
    "ROLE_ALIASES",
    "ROLE_HIERARCHY",
    "SYSTEM_ROLES",
    "CustomRole",
    "CustomRoleDraft",
    "CustomRoleUpdate",
    "Role",
    "SystemRole",
    "create_custom_role",
    "deactivate_custom_role",
    "get_system_role",
    "is_system_role_id",
    "list_roles",
    "list_system_roles",
    "meets_minimum_role",
    "resolve_role_permissions",
    "role_rank",
    "update_custom_role",
]
