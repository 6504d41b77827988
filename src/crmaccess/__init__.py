from .config import EnforcementMode, LogLevel, RBACConfig, load_config_from_env
from .exceptions import (
    ConfigurationError,
    CRMAccessError,
    InvalidPermissionError,
    RoleConflictError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    SystemRoleImmutableError,
    UnknownPermissionError,
)
from .guard import (
    AccessGuard,
    AccessRequirement,
    CallerContext,
    GuardResult,
    get_access_guard,
    reset_access_guard,
)
from .logging import (
    AccessLogFormatter,
    AccessLoggerAdapter,
    get_access_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    CATALOG,
    CORE_PERMISSIONS,
    ActionKind,
    AdminPermissions,
    ClientPermissions,
    ConditionOperator,
    DealPermissions,
    DeviceType,
    Permission,
    PermissionCondition,
    RequestContext,
    ResourceKind,
    ScopeKind,
    build_permission_key,
    can_access_resource,
    get_permission_level,
    has_all_permissions,
    has_any_permission,
    has_contextual_permission,
    has_permission,
    is_known_permission,
    validate_permissions,
)
from .roles import (
    ROLE_HIERARCHY,
    SYSTEM_ROLES,
    CustomRole,
    CustomRoleDraft,
    CustomRoleUpdate,
    Role,
    SystemRole,
    create_custom_role,
    deactivate_custom_role,
    get_system_role,
    list_roles,
    list_system_roles,
    meets_minimum_role,
    resolve_role_permissions,
    update_custom_role,
)

__all__ = [
    'CATALOG',
    'CORE_PERMISSIONS',
    'ROLE_HIERARCHY',
    'SYSTEM_ROLES',
    'AccessGuard',
    'AccessLogFormatter',
    'AccessLoggerAdapter',
    'AccessRequirement',
    'ActionKind',
    'AdminPermissions',
    'CRMAccessError',
    'CallerContext',
    'ConfigurationError',
    'ClientPermissions',
    'ConditionOperator',
    'CustomRole',
    'CustomRoleDraft',
    'CustomRoleUpdate',
    'DealPermissions',
    'DeviceType',
    'EnforcementMode',
    'GuardResult',
    'InvalidPermissionError',
    'LogLevel',
    'Permission',
    'PermissionCondition',
    'RBACConfig',
    'RequestContext',
    'ResourceKind',
    'Role',
    'RoleConflictError',
    'RoleInUseError',
    'RoleNotFoundError',
    'RoleValidationError',
    'ScopeKind',
    'SystemRole',
    'SystemRoleImmutableError',
    'UnknownPermissionError',
    'build_permission_key',
    'can_access_resource',
    'create_custom_role',
    'deactivate_custom_role',
    'get_access_guard',
    'get_access_logger',
    'get_permission_level',
    'get_system_role',
    'has_all_permissions',
    'has_any_permission',
    'has_contextual_permission',
    'has_permission',
    'is_known_permission',
    'list_roles',
    'list_system_roles',
    'load_config_from_env',
    'meets_minimum_role',
    'reset_access_guard',
    'resolve_role_permissions',
    'safe_preview',
    'setup_logging',
    'update_custom_role',
    'validate_permissions',
]
