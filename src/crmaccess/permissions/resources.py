"""Per-resource permission helpers for call-site readability.

Each helper fixes a resource and action and forwards the scope to
:mod:`crmaccess.permissions.checker`; no additional rules live here.

Example::

    if not ClientPermissions.can_update(caller.permissions, "team"):
        return forbidden()
"""

from __future__ import annotations

from collections.abc import Iterable

from .checker import PermissionLike, can_access_resource, get_permission_level, has_permission
from .constants import ActionKind, ResourceKind, ScopeKind

Scope = ScopeKind | str


class ClientPermissions:
    """Authorization questions about clients."""

    @staticmethod
    def can_view(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.VIEW, scope)

    @staticmethod
    def can_create(permissions: Iterable[PermissionLike]) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.CREATE)

    @staticmethod
    def can_update(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.UPDATE, scope)

    @staticmethod
    def can_delete(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.DELETE, scope)

    @staticmethod
    def can_export(permissions: Iterable[PermissionLike]) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.EXPORT)

    @staticmethod
    def can_assign(permissions: Iterable[PermissionLike]) -> bool:
        return can_access_resource(permissions, ResourceKind.CLIENTS, ActionKind.ASSIGN)

    @staticmethod
    def access_level(permissions: Iterable[PermissionLike]) -> ScopeKind | None:
        return get_permission_level(permissions, ResourceKind.CLIENTS)


class DealPermissions:
    """Authorization questions about deals.

    Approval is a single unscoped gate (``DEALS_APPROVE``); holding any
    view or update scope on deals does not imply it.
    """

    @staticmethod
    def can_view(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.DEALS, ActionKind.VIEW, scope)

    @staticmethod
    def can_create(permissions: Iterable[PermissionLike]) -> bool:
        return can_access_resource(permissions, ResourceKind.DEALS, ActionKind.CREATE)

    @staticmethod
    def can_update(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.DEALS, ActionKind.UPDATE, scope)

    @staticmethod
    def can_delete(permissions: Iterable[PermissionLike], scope: Scope = ScopeKind.OWN) -> bool:
        return can_access_resource(permissions, ResourceKind.DEALS, ActionKind.DELETE, scope)

    @staticmethod
    def can_approve(permissions: Iterable[PermissionLike]) -> bool:
        return can_access_resource(permissions, ResourceKind.DEALS, ActionKind.APPROVE)

    @staticmethod
    def access_level(permissions: Iterable[PermissionLike]) -> ScopeKind | None:
        return get_permission_level(permissions, ResourceKind.DEALS)


class AdminPermissions:
    """Tenant administration gates, each a single fixed permission."""

    MANAGE_MEMBERS = "MEMBERS_MANAGE"
    INVITE_MEMBERS = "MEMBERS_INVITE"
    MANAGE_SETTINGS = "SETTINGS_MANAGE"
    MANAGE_BILLING = "BILLING_MANAGE"
    VIEW_AUDIT_LOGS = "AUDIT_LOGS_VIEW"
    MANAGE_INTEGRATIONS = "INTEGRATIONS_MANAGE"

    @staticmethod
    def can_manage_members(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.MANAGE_MEMBERS)

    @staticmethod
    def can_invite_members(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.INVITE_MEMBERS)

    @staticmethod
    def can_manage_settings(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.MANAGE_SETTINGS)

    @staticmethod
    def can_manage_billing(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.MANAGE_BILLING)

    @staticmethod
    def can_view_audit_logs(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.VIEW_AUDIT_LOGS)

    @staticmethod
    def can_manage_integrations(permissions: Iterable[PermissionLike]) -> bool:
        return has_permission(permissions, AdminPermissions.MANAGE_INTEGRATIONS)


__all__ = [
    "AdminPermissions",
    "ClientPermissions",
    "DealPermissions",
]
