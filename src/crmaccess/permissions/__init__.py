"""Permission catalog, checks and contextual policies for the CRM.

Defines:
- ResourceKind / ActionKind / ScopeKind: the permission vocabulary
- CORE_PERMISSIONS / CATALOG / Permission: the closed permission catalog
- has_permission() and friends: pure checks against a caller's set
- has_contextual_permission(): role grant plus request-attribute conditions
- ClientPermissions / DealPermissions / AdminPermissions: named predicates
"""

from .catalog import (
    CATALOG,
    CORE_PERMISSIONS,
    Permission,
    build_permission_key,
    is_known_permission,
    lookup_permission,
    permissions_for_resource,
    validate_permissions,
)
from .checker import (
    PermissionLike,
    can_access_resource,
    get_permission_level,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from .constants import SCOPE_PRECEDENCE, ActionKind, ResourceKind, ScopeKind
from .policy import (
    ConditionOperator,
    DeviceType,
    PermissionCondition,
    RequestContext,
    evaluate_condition,
    evaluate_conditions,
    has_contextual_permission,
)
from .resources import AdminPermissions, ClientPermissions, DealPermissions

__all__ = [
    "CATALOG",
    "CORE_PERMISSIONS",
    "SCOPE_PRECEDENCE",
    "ActionKind",
    "AdminPermissions",
    "ClientPermissions",
    "ConditionOperator",
    "DealPermissions",
    "DeviceType",
    "Permission",
    "PermissionCondition",
    "PermissionLike",
    "RequestContext",
    "ResourceKind",
    "ScopeKind",
    "build_permission_key",
    "can_access_resource",
    "evaluate_condition",
    "evaluate_conditions",
    "get_permission_level",
    "has_all_permissions",
    "has_any_permission",
    "has_contextual_permission",
    "has_permission",
    "is_known_permission",
    "lookup_permission",
    "permissions_for_resource",
    "validate_permissions",
]
