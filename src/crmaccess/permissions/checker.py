"""Permission checks against a caller's permission set.

Pure functions used by route handlers, resource helpers and the access
guard. The caller's permission set is produced upstream (session/tenant
resolution) and passed into every call; nothing here derives or caches it.

Unknown permission keys follow one of two policies:

- lenient (default): the key can never match, the check returns False
  and a warning is logged so typos in calling code show up;
- strict (``strict=True``): ``UnknownPermissionError`` is raised, or
  ``InvalidPermissionError`` for bad resource/action/scope tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Union

from ..exceptions import InvalidPermissionError, UnknownPermissionError
from .catalog import Permission, build_permission_key, is_known_permission, lookup_permission
from .constants import ActionKind, ResourceKind, ScopeKind

logger = logging.getLogger(__name__)

PermissionLike = Union[str, Permission]


def _key(permission: PermissionLike) -> str:
    return permission.key if isinstance(permission, Permission) else permission


def _as_set(permissions: Iterable[PermissionLike]) -> frozenset[str]:
    return frozenset(_key(p) for p in permissions)


def _known(key: str, *, strict: bool) -> bool:
    """Return whether ``key`` is in the catalog, raising in strict mode."""
    if is_known_permission(key):
        return True
    if strict:
        raise UnknownPermissionError(f"Unknown permission: {key!r}", permission=key)
    logger.warning("Permission check against unknown permission %r (never matches)", key)
    return False


def has_permission(
    permissions: Iterable[PermissionLike],
    permission: PermissionLike,
    *,
    strict: bool = False,
) -> bool:
    """Check exact membership of ``permission`` in the caller's set.

    Args:
        permissions: Caller's permission strings.
        permission: Required permission key (or ``Permission``).
        strict: Raise on keys outside the catalog instead of returning False.

    Returns:
        True if the permission is granted. An empty set never grants.

    Example::

        has_permission({"CLIENTS_VIEW_OWN"}, "CLIENTS_VIEW_OWN")  # True
        has_permission(set(), "CLIENTS_VIEW_OWN")                 # False
    """
    key = _key(permission)
    if not _known(key, strict=strict):
        return False
    return key in _as_set(permissions)


def has_any_permission(
    permissions: Iterable[PermissionLike],
    required: Iterable[PermissionLike],
    *,
    strict: bool = False,
) -> bool:
    """Check that at least one ``required`` permission is granted.

    False when either side is empty.
    """
    granted = _as_set(permissions)
    matched = False
    for key in (_key(p) for p in required):
        if _known(key, strict=strict) and key in granted:
            matched = True
    return matched


def has_all_permissions(
    permissions: Iterable[PermissionLike],
    required: Iterable[PermissionLike],
    *,
    strict: bool = False,
) -> bool:
    """Check that every ``required`` permission is granted.

    An empty ``required`` list is vacuously satisfied, even for an empty
    permission set. Do not build a requirement list dynamically and pass
    it here unchecked: an accidentally empty list allows everything.
    """
    granted = _as_set(permissions)
    satisfied = True
    for key in (_key(p) for p in required):
        if not _known(key, strict=strict) or key not in granted:
            satisfied = False
    return satisfied


def can_access_resource(
    permissions: Iterable[PermissionLike],
    resource: ResourceKind | str,
    action: ActionKind | str,
    scope: ScopeKind | str | None = None,
    *,
    strict: bool = False,
) -> bool:
    """Check a resource/action/scope triple against the caller's set.

    Builds the candidate key (``clients``/``view``/``own`` →
    ``CLIENTS_VIEW_OWN``; ``tenant`` scope → ``_ALL``) and delegates to
    :func:`has_permission`. Without ``scope`` the scope-less key is tested
    (``CLIENTS_CREATE``, not ``CLIENTS_CREATE_OWN``).

    Example::

        can_access_resource(["CLIENTS_VIEW_OWN"], "clients", "view", "own")     # True
        can_access_resource(["CLIENTS_VIEW_OWN"], "clients", "view", "tenant")  # False
        can_access_resource(["CLIENTS_CREATE"], "clients", "create")            # True
    """
    try:
        key = build_permission_key(resource, action, scope)
    except InvalidPermissionError:
        if strict:
            raise
        logger.warning(
            "Resource check with invalid tokens resource=%r action=%r scope=%r (never matches)",
            resource,
            action,
            scope,
        )
        return False
    return has_permission(permissions, key, strict=strict)


def get_permission_level(
    permissions: Iterable[PermissionLike],
    resource: ResourceKind | str,
) -> ScopeKind | None:
    """Return the broadest scope the caller holds on ``resource``.

    Any action counts. Precedence is strictly ``tenant`` > ``team`` >
    ``own``: a tenant-wide (``*_ALL``) permission wins over a team one.
    Permissions outside the catalog are ignored.

    Returns:
        ``ScopeKind.TENANT``, ``ScopeKind.TEAM``, ``ScopeKind.OWN`` or None
        when the caller holds no scoped permission on the resource.

    Example::

        get_permission_level({"CLIENTS_VIEW_ALL", "CLIENTS_VIEW_TEAM"}, "clients")  # TENANT
        get_permission_level({"CLIENTS_CREATE"}, "clients")                         # None
    """
    try:
        resource_kind = resource if isinstance(resource, ResourceKind) else ResourceKind(resource.lower())
    except (ValueError, AttributeError):
        logger.warning("Permission level requested for unknown resource %r", resource)
        return None

    best: ScopeKind | None = None
    for key in _as_set(permissions):
        entry = lookup_permission(key)
        if entry is None or entry.resource is not resource_kind or entry.scope is None:
            continue
        if best is None or entry.scope.rank > best.rank:
            best = entry.scope
    return best


__all__ = [
    "PermissionLike",
    "can_access_resource",
    "get_permission_level",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
]
