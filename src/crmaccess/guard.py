"""Access guard: one entry point for route-level authorization decisions.

Provides:
- ``CallerContext`` — the resolved caller (ids, role, permission set, request attributes).
- ``AccessRequirement`` — what a route needs (permission(s), resource triple, roles, ...).
- ``GuardResult`` — allow/deny decision with a reason.
- ``AccessGuard`` — evaluates requirements under the configured enforcement mode.

The guard never raises for a denial; callers turn ``GuardResult.blocked``
into their own transport response (e.g. HTTP 403).

Usage::

    guard = get_access_guard()
    result = guard.check(caller, AccessRequirement(resource="clients", action="update", scope="team"))
    if result.blocked:
        return json_response({"error": "Insufficient permissions"}, status=403)
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import EnforcementMode, RBACConfig
from .exceptions import ConfigurationError
from .logging import get_access_logger
from .permissions.checker import (
    can_access_resource,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from .permissions.constants import ActionKind, ResourceKind, ScopeKind
from .permissions.policy import ConditionLike, RequestContext, has_contextual_permission
from .roles.models import CustomRole
from .roles.registry import meets_minimum_role, resolve_role_permissions

logger = get_access_logger(__name__)


# ── Caller & Requirement ─────────────────────────────────────────


@dataclass(frozen=True)
class CallerContext:
    """Resolved caller for one request.

    Attributes:
        user_id: Authenticated user.
        tenant_id: Tenant the request targets ("" when none was resolved).
        role: Caller's role id in that tenant.
        permissions: Flat permission set produced at session resolution.
        request: Request attributes for contextual conditions.
    """

    user_id: str
    tenant_id: str = ""
    role: str = "viewer"
    permissions: frozenset[str] = frozenset()
    request: Optional[RequestContext] = None

    def __post_init__(self) -> None:
        if not isinstance(self.permissions, frozenset):
            object.__setattr__(self, "permissions", frozenset(self.permissions))


@dataclass(frozen=True)
class AccessRequirement:
    """What a route requires of its caller.

    Exactly one rule family applies, checked in this order:

    1. ``validate`` — custom predicate over the caller
    2. ``permission`` — single permission, with optional ``conditions``
    3. ``permissions`` — any of them, or all with ``require_all``
    4. ``resource`` + ``action`` (+ ``scope``)
    5. ``roles`` — caller's role id must be listed
    6. ``min_role`` — caller's role must rank at or above it

    A requirement with none of these allows any caller.
    ``require_tenant`` is checked before all of them.
    """

    permission: Optional[str] = None
    conditions: tuple[ConditionLike, ...] = ()
    permissions: tuple[str, ...] = ()
    require_all: bool = False
    resource: Optional[ResourceKind | str] = None
    action: Optional[ActionKind | str] = None
    scope: Optional[ScopeKind | str] = None
    roles: tuple[str, ...] = ()
    min_role: Optional[str] = None
    validate: Optional[Callable[[CallerContext], bool]] = field(default=None, compare=False)
    require_tenant: bool = False

    def __post_init__(self) -> None:
        if self.conditions and not self.permission:
            raise ConfigurationError(
                "Conditions apply only to a single permission requirement",
                conditions=len(self.conditions),
            )


# ── Guard Result ─────────────────────────────────────────────────


@dataclass
class GuardResult:
    """Result from an access check."""

    allowed: bool = True
    reason: str = ""
    processing_ms: float = 0.0

    @property
    def blocked(self) -> bool:
        return not self.allowed


# ── Access Guard ─────────────────────────────────────────────────


class AccessGuard:
    """Evaluates ``AccessRequirement`` for a ``CallerContext``.

    Enforcement modes:
        - ``enforce`` → failed requirements are blocked
        - ``warn``    → failed requirements are logged and allowed; the
                        denial reason is still reported on the result
        - ``off``     → nothing is evaluated
    """

    def __init__(self, config: RBACConfig | None = None) -> None:
        self._config = config or RBACConfig()
        self._mode = EnforcementMode(self._config.enforcement)

    @property
    def mode(self) -> EnforcementMode:
        return self._mode

    @property
    def strict(self) -> bool:
        return self._config.strict_permissions

    def resolve_caller(
        self,
        user_id: str,
        tenant_id: str = "",
        role: Optional[str] = None,
        custom_roles: Iterable[CustomRole] = (),
        request: Optional[RequestContext] = None,
    ) -> CallerContext:
        """Build a CallerContext from a member's role assignment.

        Members without a role get ``config.default_role``. With
        ``strict_permissions`` an unknown role raises ``RoleNotFoundError``.
        """
        role_id = role or self._config.default_role
        return CallerContext(
            user_id=user_id,
            tenant_id=tenant_id,
            role=role_id,
            permissions=frozenset(resolve_role_permissions(role_id, custom_roles, strict=self.strict)),
            request=request,
        )

    def evaluate(self, caller: CallerContext, requirement: AccessRequirement) -> str | None:
        """Evaluate a requirement, ignoring enforcement mode.

        Returns:
            None if satisfied, or a human-readable denial reason.
        """
        if requirement.require_tenant and not caller.tenant_id:
            return "tenant context required"

        perms = caller.permissions
        strict = self.strict

        if requirement.validate is not None:
            try:
                passed = requirement.validate(caller)
            except Exception:
                logger.exception("Custom access validation raised", tenant_id=caller.tenant_id, user_id=caller.user_id)
                return "custom validation error"
            return None if passed else "custom validation failed"

        if requirement.permission:
            if requirement.conditions and caller.request is None:
                return f"request context required for conditional permission: {requirement.permission}"
            if caller.request is None:
                granted = has_permission(perms, requirement.permission, strict=strict)
            else:
                granted = has_contextual_permission(
                    perms,
                    requirement.permission,
                    caller.request,
                    requirement.conditions,
                    strict=strict,
                )
            return None if granted else f"missing permission: {requirement.permission}"

        if requirement.permissions:
            if requirement.require_all:
                granted = has_all_permissions(perms, requirement.permissions, strict=strict)
                return None if granted else f"missing one of required permissions: {', '.join(requirement.permissions)}"
            granted = has_any_permission(perms, requirement.permissions, strict=strict)
            return None if granted else f"none of permissions granted: {', '.join(requirement.permissions)}"

        if requirement.resource and requirement.action:
            if can_access_resource(perms, requirement.resource, requirement.action, requirement.scope, strict=strict):
                return None
            scope = f"/{_token(requirement.scope)}" if requirement.scope else ""
            return f"no access to {_token(requirement.resource)}:{_token(requirement.action)}{scope}"

        if requirement.roles:
            return None if caller.role in requirement.roles else f"role not allowed: {caller.role}"

        if requirement.min_role:
            if meets_minimum_role(caller.role, requirement.min_role):
                return None
            return f"role {caller.role} below required {requirement.min_role}"

        return None

    def check(self, caller: CallerContext, requirement: AccessRequirement) -> GuardResult:
        """Check a requirement under the configured enforcement mode.

        Args:
            caller: Resolved caller for the request.
            requirement: What the route needs.

        Returns:
            GuardResult with allow/block decision.
        """
        start = time.monotonic()
        result = GuardResult()

        if self._mode is EnforcementMode.OFF:
            logger.debug(
                "Access check skipped (enforcement=off)",
                tenant_id=caller.tenant_id,
                user_id=caller.user_id,
            )
            result.processing_ms = (time.monotonic() - start) * 1000
            return result

        reason = self.evaluate(caller, requirement)
        if reason is not None:
            result.reason = reason
            if self._mode is EnforcementMode.ENFORCE:
                result.allowed = False
                logger.info(
                    "Access denied: %s",
                    reason,
                    tenant_id=caller.tenant_id,
                    user_id=caller.user_id,
                    extra={"role": caller.role},
                )
            else:
                logger.warning(
                    "Access would be denied (enforcement=warn): %s",
                    reason,
                    tenant_id=caller.tenant_id,
                    user_id=caller.user_id,
                    extra={"role": caller.role},
                )

        result.processing_ms = (time.monotonic() - start) * 1000
        return result


def _token(value: object) -> str:
    return value.value if isinstance(value, (ResourceKind, ActionKind, ScopeKind)) else str(value)


# ── Singleton factory ────────────────────────────────────────────

_guard: AccessGuard | None = None


def get_access_guard(config: RBACConfig | None = None) -> AccessGuard:
    """Get or create the process-wide AccessGuard.

    Args:
        config: Configuration (used only on first call; loaded from the
            environment when omitted).
    """
    global _guard
    if _guard is None:
        if config is None:
            from .config import load_config_from_env

            config = load_config_from_env()
        _guard = AccessGuard(config)
    return _guard


def reset_access_guard() -> None:
    """Reset the singleton (for testing)."""
    global _guard
    _guard = None


__all__ = [
    "AccessGuard",
    "AccessRequirement",
    "CallerContext",
    "GuardResult",
    "get_access_guard",
    "reset_access_guard",
]
