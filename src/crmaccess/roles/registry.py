"""System roles, role hierarchy and custom-role administration.

Provides:
- ``SYSTEM_ROLES`` — the five built-in roles in fixed order.
- ``ROLE_HIERARCHY`` — rank of each system role (viewer lowest, owner highest).
- ``list_roles()`` — merge system roles with a tenant's custom roles.
- ``resolve_role_permissions()`` — permission list for a role id.
- ``create_custom_role()`` / ``update_custom_role()`` / ``deactivate_custom_role()``
  — validation rules for tenant-managed roles.

Storage of custom roles belongs to the caller: these functions take the
tenant's existing roles as input and return new role values.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from typing import Optional, Union

from ..exceptions import (
    RoleConflictError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    SystemRoleImmutableError,
)
from ..permissions.catalog import CORE_PERMISSIONS, validate_permissions
from .models import CustomRole, CustomRoleDraft, CustomRoleUpdate, Role, SystemRole

logger = logging.getLogger(__name__)


# ── System Roles ────────────────────────────────────────

OWNER = SystemRole(
    id="owner",
    name="Owner",
    description="Full access to all tenant resources and settings",
    color="#10b981",
    icon="👑",
    permissions=tuple(CORE_PERMISSIONS),
)

ADMIN = SystemRole(
    id="admin",
    name="Administrator",
    description="Full access except billing and member deletion",
    color="#3b82f6",
    icon="⚡",
    permissions=(
        "CLIENTS_VIEW_ALL", "CLIENTS_CREATE", "CLIENTS_UPDATE_ALL", "CLIENTS_EXPORT", "CLIENTS_ASSIGN",
        "DEALS_VIEW_ALL", "DEALS_CREATE", "DEALS_UPDATE_ALL", "DEALS_APPROVE",
        "TASKS_VIEW_TEAM", "TASKS_CREATE", "TASKS_UPDATE_ALL", "TASKS_ASSIGN",
        "CONVERSATIONS_VIEW_ALL", "CONVERSATIONS_CREATE", "COMMUNICATION_MANAGE",
        "REPORTS_VIEW_ALL", "REPORTS_CREATE", "REPORTS_EXPORT", "ANALYTICS_VIEW", "ANALYTICS_MANAGE",
        "MEMBERS_VIEW", "MEMBERS_INVITE", "MEMBERS_MANAGE",
        "SETTINGS_VIEW", "SETTINGS_MANAGE",
        "INTEGRATIONS_VIEW", "INTEGRATIONS_MANAGE",
        "AUTOMATION_VIEW", "AUTOMATION_MANAGE", "WORKFLOWS_CREATE", "WORKFLOWS_MANAGE",
        "LEAD_SCORING_VIEW", "LEAD_SCORING_CONFIGURE",
        "MLS_MANAGE",
        "AUDIT_LOGS_VIEW",
    ),
)  # fmt: skip

MANAGER = SystemRole(
    id="manager",
    name="Manager",
    description="Team management and oversight capabilities",
    color="#8b5cf6",
    icon="👥",
    permissions=(
        "CLIENTS_VIEW_TEAM", "CLIENTS_CREATE", "CLIENTS_UPDATE_TEAM", "CLIENTS_ASSIGN",
        "DEALS_VIEW_TEAM", "DEALS_CREATE", "DEALS_UPDATE_TEAM",
        "TASKS_VIEW_TEAM", "TASKS_CREATE", "TASKS_UPDATE_ALL", "TASKS_ASSIGN",
        "CONVERSATIONS_VIEW_ALL", "CONVERSATIONS_CREATE",
        "REPORTS_VIEW_ALL", "REPORTS_CREATE", "ANALYTICS_VIEW",
        "MEMBERS_VIEW",
        "SETTINGS_VIEW",
        "AUTOMATION_VIEW", "WORKFLOWS_CREATE",
        "LEAD_SCORING_VIEW",
    ),
)  # fmt: skip

AGENT = SystemRole(
    id="agent",
    name="Agent",
    description="Standard agent with full client and deal management",
    color="#f59e0b",
    icon="🏠",
    permissions=(
        "CLIENTS_VIEW_OWN", "CLIENTS_CREATE", "CLIENTS_UPDATE_OWN", "CLIENTS_EXPORT",
        "DEALS_VIEW_OWN", "DEALS_CREATE", "DEALS_UPDATE_OWN",
        "TASKS_VIEW_OWN", "TASKS_CREATE", "TASKS_UPDATE_OWN",
        "CONVERSATIONS_VIEW_OWN", "CONVERSATIONS_CREATE",
        "REPORTS_VIEW_OWN",
        "SETTINGS_VIEW",
        "AUTOMATION_VIEW",
        "LEAD_SCORING_VIEW",
    ),
)  # fmt: skip

# Read-only, self-scope: every entry is a *_VIEW_OWN permission
VIEWER = SystemRole(
    id="viewer",
    name="Viewer",
    description="Read-only access to assigned resources",
    color="#6b7280",
    icon="👁️",
    permissions=(
        "CLIENTS_VIEW_OWN",
        "DEALS_VIEW_OWN",
        "TASKS_VIEW_OWN",
        "CONVERSATIONS_VIEW_OWN",
        "REPORTS_VIEW_OWN",
    ),
)

SYSTEM_ROLES: tuple[SystemRole, ...] = (OWNER, ADMIN, MANAGER, AGENT, VIEWER)

_SYSTEM_BY_ID: dict[str, SystemRole] = {role.id: role for role in SYSTEM_ROLES}

# Alternate names used by brokerages
ROLE_ALIASES: dict[str, str] = {"broker": "manager"}


# ── Role Hierarchy ──────────────────────────────────────

ROLE_HIERARCHY: dict[str, int] = {
    "viewer": 0,
    "agent": 1,
    "manager": 2,
    "admin": 3,
    "owner": 4,
}


def _canonical_id(role_id: str) -> str:
    return ROLE_ALIASES.get(role_id, role_id)


def role_rank(role_id: str) -> int:
    """Rank of a system role in :data:`ROLE_HIERARCHY`; -1 for anything else."""
    return ROLE_HIERARCHY.get(_canonical_id(role_id), -1)


def meets_minimum_role(role_id: str, min_role: str) -> bool:
    """Check whether ``role_id`` ranks at or above ``min_role``.

    Custom and unknown roles rank below every system role.
    An unknown ``min_role`` is never met.
    """
    required = role_rank(min_role)
    if required < 0:
        logger.warning("Minimum role %r is not a system role", min_role)
        return False
    return role_rank(role_id) >= required


# ── Lookup ──────────────────────────────────────────────


def list_system_roles() -> tuple[SystemRole, ...]:
    """The five system roles: owner, admin, manager, agent, viewer."""
    return SYSTEM_ROLES


def get_system_role(role_id: str) -> SystemRole | None:
    return _SYSTEM_BY_ID.get(_canonical_id(role_id))


def is_system_role_id(role_id: str) -> bool:
    return _canonical_id(role_id) in _SYSTEM_BY_ID


def _tenant_roles(custom_roles: Iterable[CustomRole], tenant_id: str) -> list[CustomRole]:
    return [role for role in custom_roles if role.tenant_id == tenant_id and role.is_active]


def list_roles(
    tenant_id: str,
    custom_roles: Iterable[CustomRole] = (),
    *,
    include_system: bool = True,
) -> tuple[Role, ...]:
    """Roles visible in a tenant.

    System roles come first (when ``include_system``), followed by the
    tenant's active custom roles in the order supplied. Roles of other
    tenants and soft-deleted roles are dropped; nothing is deduplicated.
    """
    roles: list[Role] = list(SYSTEM_ROLES) if include_system else []
    roles.extend(_tenant_roles(custom_roles, tenant_id))
    return tuple(roles)


def resolve_role_permissions(
    role_id: str,
    custom_roles: Iterable[CustomRole] = (),
    *,
    strict: bool = False,
) -> tuple[str, ...]:
    """Permission list granted by a role id.

    System roles (and aliases) resolve from :data:`SYSTEM_ROLES`; other ids
    are looked up among the active ``custom_roles``. Unknown ids grant
    nothing, or raise ``RoleNotFoundError`` when ``strict``.
    """
    system_role = get_system_role(role_id)
    if system_role is not None:
        return system_role.permissions
    for role in custom_roles:
        if role.id == role_id and role.is_active:
            return role.permissions
    if strict:
        raise RoleNotFoundError(f"Role '{role_id}' not found", role_id=role_id)
    logger.debug("Role %r not found; resolving to no permissions", role_id)
    return ()


# ── Custom Role Administration ──────────────────────────


def _ensure_custom(role: Union[SystemRole, CustomRole]) -> CustomRole:
    if isinstance(role, SystemRole):
        raise SystemRoleImmutableError(f"System role '{role.id}' cannot be modified", role_id=role.id)
    return role


def _check_permissions(permissions: Iterable[str]) -> None:
    invalid = validate_permissions(permissions)
    if invalid:
        raise RoleValidationError(
            f"Invalid permissions: {', '.join(invalid)}",
            invalid_permissions=list(invalid),
        )


def _check_name_free(
    name: str,
    tenant_id: str,
    existing_roles: Iterable[CustomRole],
    *,
    exclude_id: Optional[str] = None,
) -> None:
    for role in _tenant_roles(existing_roles, tenant_id):
        if role.name == name and role.id != exclude_id:
            raise RoleConflictError(
                f"Role name '{name}' already exists",
                tenant_id=tenant_id,
                role_id=role.id,
            )


def create_custom_role(
    draft: CustomRoleDraft,
    *,
    tenant_id: str,
    existing_roles: Iterable[CustomRole] = (),
    role_id: Optional[str] = None,
) -> CustomRole:
    """Validate a draft and build the new tenant role.

    Args:
        draft: Validated creation payload.
        tenant_id: Tenant that will own the role.
        existing_roles: The tenant's current custom roles (from storage).
        role_id: Identifier to use; a UUID4 string when omitted.

    Raises:
        RoleConflictError: Another active role in the tenant has the same name.
        RoleValidationError: Some permissions are not in the catalog.
    """
    existing = list(existing_roles)
    _check_name_free(draft.name, tenant_id, existing)
    _check_permissions(draft.permissions)

    role = CustomRole(
        id=role_id or str(uuid.uuid4()),
        tenant_id=tenant_id,
        name=draft.name,
        description=draft.description,
        permissions=tuple(draft.permissions),
        color=draft.color,
        icon=draft.icon,
    )
    logger.info(
        "Custom role created: %s",
        role.name,
        extra={"tenant_id": tenant_id, "role_id": role.id, "permissions_count": len(role.permissions)},
    )
    return role


def update_custom_role(
    role: Union[SystemRole, CustomRole],
    changes: CustomRoleUpdate,
    *,
    existing_roles: Iterable[CustomRole] = (),
) -> CustomRole:
    """Apply a partial update and return the updated role.

    Raises:
        SystemRoleImmutableError: ``role`` is a system role.
        RoleConflictError: The new name is taken by another active role.
        RoleValidationError: New permissions are not in the catalog.
    """
    current = _ensure_custom(role)
    updates = changes.model_dump(exclude_unset=True)

    new_name = updates.get("name")
    if new_name is not None and new_name != current.name:
        _check_name_free(new_name, current.tenant_id, existing_roles, exclude_id=current.id)
    if updates.get("permissions") is not None:
        _check_permissions(updates["permissions"])
        updates["permissions"] = tuple(updates["permissions"])

    # Explicit nulls clear optional fields but never name or permissions
    for required in ("name", "permissions"):
        if required in updates and updates[required] is None:
            del updates[required]

    updated = current.model_copy(update=updates)
    logger.info(
        "Custom role updated: %s",
        updated.name,
        extra={"tenant_id": updated.tenant_id, "role_id": updated.id, "changes": sorted(updates)},
    )
    return updated


def deactivate_custom_role(
    role: Union[SystemRole, CustomRole],
    *,
    assigned_members: int = 0,
) -> CustomRole:
    """Soft-delete a custom role.

    Args:
        role: Role to deactivate.
        assigned_members: Number of tenant members currently holding it.

    Raises:
        SystemRoleImmutableError: ``role`` is a system role.
        RoleInUseError: Members are still assigned to the role.
    """
    current = _ensure_custom(role)
    if assigned_members > 0:
        raise RoleInUseError(
            "Cannot delete role that is assigned to members",
            role_id=current.id,
            assigned_members=assigned_members,
        )
    logger.info(
        "Custom role deactivated: %s",
        current.name,
        extra={"tenant_id": current.tenant_id, "role_id": current.id},
    )
    return current.model_copy(update={"is_active": False})


__all__ = [
    "ADMIN",
    "AGENT",
    "MANAGER",
    "OWNER",
    "ROLE_ALIASES",
    "ROLE_HIERARCHY",
    "SYSTEM_ROLES",
    "VIEWER",
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
