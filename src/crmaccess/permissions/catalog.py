"""Canonical permission catalog.

Defines:
- ``CORE_PERMISSIONS``: every permission key mapped to its description,
  in catalog order (read-only).
- ``CATALOG``: the same entries as ``Permission`` values.
- ``Permission``: tagged (resource, action, scope) value with a total,
  injective mapping to and from its key string.

Key format: ``{RESOURCE}_{ACTION}[_{SCOPE}]`` where the scope suffix is
``OWN``, ``TEAM`` or ``ALL``. A key without a scope is scope-independent
(``CLIENTS_CREATE``).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from ..exceptions import InvalidPermissionError, UnknownPermissionError
from .constants import ActionKind, ResourceKind, ScopeKind

_R = ResourceKind
_A = ActionKind
_S = ScopeKind

# (resource, action, scope, description), grouped by resource.
_ENTRIES: tuple[tuple[ResourceKind, ActionKind, Optional[ScopeKind], str], ...] = (
    # ── Client Management ───────────────────────────────
    (_R.CLIENTS, _A.VIEW, _S.OWN, "View clients assigned to you"),
    (_R.CLIENTS, _A.VIEW, _S.TEAM, "View clients of your teams"),
    (_R.CLIENTS, _A.VIEW, _S.TENANT, "View every client in the tenant"),
    (_R.CLIENTS, _A.CREATE, None, "Create clients"),
    (_R.CLIENTS, _A.UPDATE, _S.OWN, "Edit clients assigned to you"),
    (_R.CLIENTS, _A.UPDATE, _S.TEAM, "Edit clients of your teams"),
    (_R.CLIENTS, _A.UPDATE, _S.TENANT, "Edit every client in the tenant"),
    (_R.CLIENTS, _A.DELETE, _S.OWN, "Delete clients assigned to you"),
    (_R.CLIENTS, _A.DELETE, _S.TENANT, "Delete any client in the tenant"),
    (_R.CLIENTS, _A.EXPORT, None, "Export client lists"),
    (_R.CLIENTS, _A.ASSIGN, None, "Reassign clients between agents"),
    # ── Deal Management ─────────────────────────────────
    (_R.DEALS, _A.VIEW, _S.OWN, "View your deals"),
    (_R.DEALS, _A.VIEW, _S.TEAM, "View deals of your teams"),
    (_R.DEALS, _A.VIEW, _S.TENANT, "View every deal in the tenant"),
    (_R.DEALS, _A.CREATE, None, "Create deals"),
    (_R.DEALS, _A.UPDATE, _S.OWN, "Edit your deals"),
    (_R.DEALS, _A.UPDATE, _S.TEAM, "Edit deals of your teams"),
    (_R.DEALS, _A.UPDATE, _S.TENANT, "Edit every deal in the tenant"),
    (_R.DEALS, _A.DELETE, _S.OWN, "Delete your deals"),
    (_R.DEALS, _A.DELETE, _S.TENANT, "Delete any deal in the tenant"),
    (_R.DEALS, _A.APPROVE, None, "Approve deals"),
    # ── Task Management ─────────────────────────────────
    (_R.TASKS, _A.VIEW, _S.OWN, "View your tasks"),
    (_R.TASKS, _A.VIEW, _S.TEAM, "View tasks of your teams"),
    (_R.TASKS, _A.CREATE, None, "Create tasks"),
    (_R.TASKS, _A.UPDATE, _S.OWN, "Edit your tasks"),
    (_R.TASKS, _A.UPDATE, _S.TENANT, "Edit every task in the tenant"),
    (_R.TASKS, _A.DELETE, _S.OWN, "Delete your tasks"),
    (_R.TASKS, _A.ASSIGN, None, "Assign tasks to members"),
    # ── Communication ───────────────────────────────────
    (_R.CONVERSATIONS, _A.VIEW, _S.OWN, "View your conversations"),
    (_R.CONVERSATIONS, _A.VIEW, _S.TENANT, "View every conversation in the tenant"),
    (_R.CONVERSATIONS, _A.CREATE, None, "Start conversations"),
    (_R.COMMUNICATION, _A.MANAGE, None, "Manage email and SMS channels"),
    # ── Reports & Analytics ─────────────────────────────
    (_R.REPORTS, _A.VIEW, _S.OWN, "View basic reports about your own work"),
    (_R.REPORTS, _A.VIEW, _S.TENANT, "View all tenant reports"),
    (_R.REPORTS, _A.CREATE, None, "Create reports"),
    (_R.REPORTS, _A.EXPORT, None, "Export reports"),
    (_R.ANALYTICS, _A.VIEW, None, "View analytics dashboards"),
    (_R.ANALYTICS, _A.MANAGE, None, "Configure analytics"),
    # ── Team & Member Management ────────────────────────
    (_R.MEMBERS, _A.VIEW, None, "View tenant members"),
    (_R.MEMBERS, _A.INVITE, None, "Invite new members"),
    (_R.MEMBERS, _A.MANAGE, None, "Change member roles and status"),
    (_R.MEMBERS, _A.DELETE, None, "Remove members from the tenant"),
    # ── Settings & Billing ──────────────────────────────
    (_R.SETTINGS, _A.VIEW, None, "View tenant settings"),
    (_R.SETTINGS, _A.MANAGE, None, "Change tenant settings"),
    (_R.BILLING, _A.VIEW, None, "View billing and invoices"),
    (_R.BILLING, _A.MANAGE, None, "Manage subscription and payment methods"),
    # ── Integrations & Automation ───────────────────────
    (_R.INTEGRATIONS, _A.VIEW, None, "View connected integrations"),
    (_R.INTEGRATIONS, _A.MANAGE, None, "Connect and configure integrations"),
    (_R.AUTOMATION, _A.VIEW, None, "View automation rules"),
    (_R.AUTOMATION, _A.MANAGE, None, "Manage automation rules"),
    (_R.WORKFLOWS, _A.CREATE, None, "Create workflows"),
    (_R.WORKFLOWS, _A.MANAGE, None, "Manage workflows"),
    # ── Advanced Features ───────────────────────────────
    (_R.API_KEYS, _A.VIEW, None, "View API keys"),
    (_R.API_KEYS, _A.MANAGE, None, "Create and revoke API keys"),
    (_R.LEAD_SCORING, _A.VIEW, None, "View lead scores"),
    (_R.LEAD_SCORING, _A.CONFIGURE, None, "Configure lead scoring rules"),
    (_R.MLS, _A.MANAGE, None, "Manage MLS feeds"),
    # ── Audit & Compliance ──────────────────────────────
    (_R.AUDIT_LOGS, _A.VIEW, None, "View audit logs"),
    (_R.AUDIT_LOGS, _A.EXPORT, None, "Export audit logs"),
)


def _coerce(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    raise InvalidPermissionError(f"Unknown permission {label}: {value!r}", **{label: value})


def build_permission_key(
    resource: ResourceKind | str,
    action: ActionKind | str,
    scope: ScopeKind | str | None = None,
) -> str:
    """Build the canonical key for a resource/action/scope triple.

    Args:
        resource: ``ResourceKind`` or its lowercase token (``"clients"``).
        action: ``ActionKind`` or its lowercase token (``"view"``).
        scope: Optional ``ScopeKind`` or token (``"own"``, ``"team"``,
               ``"tenant"``/``"all"``). Omitted means the scope-less form.

    Returns:
        Key string like ``"CLIENTS_VIEW_OWN"`` or ``"CLIENTS_CREATE"``.

    Raises:
        InvalidPermissionError: If any token is outside the vocabulary.
        The key itself is not checked against the catalog.

    Example::

        build_permission_key("clients", "view", "tenant")  # "CLIENTS_VIEW_ALL"
        build_permission_key("deals", "approve")           # "DEALS_APPROVE"
    """
    resource_kind = _coerce(ResourceKind, resource, "resource")
    action_kind = _coerce(ActionKind, action, "action")
    base = f"{resource_kind.key}_{action_kind.key}"
    if scope:
        return f"{base}_{_coerce(ScopeKind, scope, 'scope').key}"
    return base


_KNOWN_KEYS: frozenset[str] = frozenset(build_permission_key(r, a, s) for r, a, s, _ in _ENTRIES)


@dataclass(frozen=True)
class Permission:
    """A catalog permission as a tagged value.

    Construction accepts enums or lowercase tokens and validates the
    combination against the catalog, so an instance always names a real
    permission. ``str(permission)`` and ``.key`` give the canonical key.

    Example::

        Permission("clients", "view", "own").key   # "CLIENTS_VIEW_OWN"
        Permission.parse("DEALS_APPROVE").scope     # None
        Permission("clients", "delete", "team")     # UnknownPermissionError
    """

    resource: ResourceKind
    action: ActionKind
    scope: Optional[ScopeKind] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "resource", _coerce(ResourceKind, self.resource, "resource"))
        object.__setattr__(self, "action", _coerce(ActionKind, self.action, "action"))
        if self.scope is not None:
            object.__setattr__(self, "scope", _coerce(ScopeKind, self.scope, "scope"))
        if self.key not in _KNOWN_KEYS:
            raise UnknownPermissionError(f"Unknown permission: {self.key}", permission=self.key)

    @property
    def key(self) -> str:
        return build_permission_key(self.resource, self.action, self.scope)

    @property
    def description(self) -> str:
        return CORE_PERMISSIONS[self.key]

    @classmethod
    def parse(cls, key: str) -> Permission:
        """Resolve a key string to its catalog ``Permission``.

        Raises:
            UnknownPermissionError: If the key is not in the catalog.
        """
        try:
            return _BY_KEY[key]
        except (KeyError, TypeError):
            raise UnknownPermissionError(f"Unknown permission: {key!r}", permission=key) from None

    def __str__(self) -> str:
        return self.key


CATALOG: tuple[Permission, ...] = tuple(Permission(r, a, s) for r, a, s, _ in _ENTRIES)

CORE_PERMISSIONS: Mapping[str, str] = MappingProxyType(
    {build_permission_key(r, a, s): description for r, a, s, description in _ENTRIES}
)

_BY_KEY: Mapping[str, Permission] = MappingProxyType({p.key: p for p in CATALOG})


def is_known_permission(key: str) -> bool:
    """Check whether ``key`` names a catalog permission."""
    return isinstance(key, str) and key in _BY_KEY


def lookup_permission(key: str) -> Permission | None:
    """Return the catalog ``Permission`` for ``key``, or None when unknown."""
    if not isinstance(key, str):
        return None
    return _BY_KEY.get(key)


def validate_permissions(keys: Iterable[str]) -> tuple[str, ...]:
    """Return the keys that are not in the catalog, in input order.

    An empty result means every key is valid.

    Example::

        validate_permissions(["CLIENTS_CREATE", "CLIENTS_FLY"])  # ("CLIENTS_FLY",)
    """
    return tuple(key for key in keys if not is_known_permission(key))


def permissions_for_resource(resource: ResourceKind | str) -> tuple[Permission, ...]:
    """Catalog entries for one resource, in catalog order.

    Raises:
        InvalidPermissionError: If ``resource`` is not a known resource token.
    """
    resource_kind = _coerce(ResourceKind, resource, "resource")
    return tuple(p for p in CATALOG if p.resource is resource_kind)


__all__ = [
    "CATALOG",
    "CORE_PERMISSIONS",
    "Permission",
    "build_permission_key",
    "is_known_permission",
    "lookup_permission",
    "permissions_for_resource",
    "validate_permissions",
]
