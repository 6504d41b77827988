"""Tests for crmaccess.guard."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from crmaccess import (
    AccessGuard,
    AccessRequirement,
    CallerContext,
    ConfigurationError,
    CustomRole,
    EnforcementMode,
    GuardResult,
    PermissionCondition,
    RBACConfig,
    RequestContext,
    RoleNotFoundError,
    UnknownPermissionError,
    get_access_guard,
    reset_access_guard,
    resolve_role_permissions,
)


def _caller(role: str = "agent", tenant_id: str = "t-1", request: RequestContext | None = None) -> CallerContext:
    return CallerContext(
        user_id="u-1",
        tenant_id=tenant_id,
        role=role,
        permissions=resolve_role_permissions(role),
        request=request,
    )


@pytest.fixture
def guard() -> AccessGuard:
    return AccessGuard(RBACConfig(enforcement="enforce"))


class TestGuardResult:
    """GuardResult tests."""

    def test_allowed_by_default(self) -> None:
        result = GuardResult()
        assert result.allowed is True
        assert result.blocked is False
        assert result.reason == ""

    def test_blocked(self) -> None:
        result = GuardResult(allowed=False, reason="missing permission: DEALS_APPROVE")
        assert result.blocked is True


class TestCallerContext:
    """CallerContext tests."""

    def test_permissions_frozen(self) -> None:
        caller = CallerContext(user_id="u-1", permissions=["CLIENTS_VIEW_OWN", "CLIENTS_VIEW_OWN"])
        assert caller.permissions == frozenset({"CLIENTS_VIEW_OWN"})

    def test_defaults(self) -> None:
        caller = CallerContext(user_id="u-1")
        assert caller.role == "viewer"
        assert caller.permissions == frozenset()
        assert caller.request is None


class TestResolveCaller:
    """Building callers from role assignments."""

    def test_system_role(self, guard: AccessGuard) -> None:
        caller = guard.resolve_caller("u-1", "t-1", role="manager")
        assert caller.role == "manager"
        assert "CLIENTS_VIEW_TEAM" in caller.permissions

    def test_default_role(self) -> None:
        guard = AccessGuard(RBACConfig(default_role="agent"))
        caller = guard.resolve_caller("u-1", "t-1")
        assert caller.role == "agent"
        assert caller.permissions == frozenset(resolve_role_permissions("agent"))

    def test_custom_role(self, guard: AccessGuard) -> None:
        closer = CustomRole(id="r-1", tenant_id="t-1", name="Closer", permissions=("DEALS_APPROVE",))
        caller = guard.resolve_caller("u-1", "t-1", role="r-1", custom_roles=[closer])
        assert caller.permissions == frozenset({"DEALS_APPROVE"})
        assert guard.check(caller, AccessRequirement(permission="DEALS_APPROVE")).allowed

    def test_unknown_role_lenient(self, guard: AccessGuard) -> None:
        assert guard.resolve_caller("u-1", "t-1", role="r-404").permissions == frozenset()

    def test_unknown_role_strict(self) -> None:
        guard = AccessGuard(RBACConfig(strict_permissions=True))
        with pytest.raises(RoleNotFoundError):
            guard.resolve_caller("u-1", "t-1", role="r-404")


class TestRequirementFamilies:
    """Each rule family under enforce mode."""

    def test_no_rule_allows(self, guard: AccessGuard) -> None:
        assert guard.check(_caller("viewer"), AccessRequirement()).allowed

    def test_single_permission(self, guard: AccessGuard) -> None:
        assert guard.check(_caller("agent"), AccessRequirement(permission="CLIENTS_CREATE")).allowed
        result = guard.check(_caller("agent"), AccessRequirement(permission="DEALS_APPROVE"))
        assert result.blocked
        assert "DEALS_APPROVE" in result.reason

    def test_any_of(self, guard: AccessGuard) -> None:
        req = AccessRequirement(permissions=("DEALS_APPROVE", "CLIENTS_CREATE"))
        assert guard.check(_caller("agent"), req).allowed
        assert guard.check(_caller("viewer"), req).blocked

    def test_all_of(self, guard: AccessGuard) -> None:
        req = AccessRequirement(permissions=("DEALS_APPROVE", "CLIENTS_CREATE"), require_all=True)
        assert guard.check(_caller("admin"), req).allowed
        assert guard.check(_caller("agent"), req).blocked

    def test_resource_action_scope(self, guard: AccessGuard) -> None:
        own = AccessRequirement(resource="clients", action="view", scope="own")
        tenant = AccessRequirement(resource="clients", action="view", scope="tenant")
        assert guard.check(_caller("agent"), own).allowed
        result = guard.check(_caller("agent"), tenant)
        assert result.blocked
        assert result.reason == "no access to clients:view/tenant"
        assert guard.check(_caller("admin"), tenant).allowed

    def test_resource_action_without_scope(self, guard: AccessGuard) -> None:
        assert guard.check(_caller("agent"), AccessRequirement(resource="deals", action="create")).allowed

    def test_roles(self, guard: AccessGuard) -> None:
        req = AccessRequirement(roles=("owner", "admin"))
        assert guard.check(_caller("admin"), req).allowed
        assert guard.check(_caller("manager"), req).blocked

    def test_min_role(self, guard: AccessGuard) -> None:
        req = AccessRequirement(min_role="manager")
        assert guard.check(_caller("owner"), req).allowed
        assert guard.check(_caller("manager"), req).allowed
        assert guard.check(_caller("agent"), req).blocked

    def test_validate(self, guard: AccessGuard) -> None:
        req = AccessRequirement(validate=lambda caller: caller.user_id == "u-1")
        assert guard.check(_caller(), req).allowed
        assert guard.check(_caller(), AccessRequirement(validate=lambda caller: False)).blocked

    def test_validate_takes_precedence(self, guard: AccessGuard) -> None:
        """Only the first applicable rule family is evaluated."""
        req = AccessRequirement(validate=lambda caller: True, permission="BILLING_MANAGE")
        assert guard.check(_caller("viewer"), req).allowed

    def test_validate_error_denies(self, guard: AccessGuard, caplog: pytest.LogCaptureFixture) -> None:
        """A predicate that raises blocks the caller instead of propagating."""
        req = AccessRequirement(validate=lambda caller: caller.tenant_membership["active"])
        with caplog.at_level(logging.ERROR, logger="crmaccess.guard"):
            result = guard.check(_caller(), req)
        assert result.blocked
        assert result.reason == "custom validation error"
        assert "Custom access validation raised" in caplog.text
        assert caplog.records[-1].exc_info is not None

    def test_validate_error_in_warn_mode(self) -> None:
        guard = AccessGuard(RBACConfig(enforcement="warn"))
        result = guard.check(_caller(), AccessRequirement(validate=lambda caller: 1 / 0))
        assert result.allowed
        assert result.reason == "custom validation error"

    def test_permission_before_roles(self, guard: AccessGuard) -> None:
        req = AccessRequirement(permission="CLIENTS_CREATE", roles=("owner",))
        assert guard.check(_caller("agent"), req).allowed

    def test_require_tenant(self, guard: AccessGuard) -> None:
        req = AccessRequirement(require_tenant=True)
        assert guard.check(_caller(tenant_id="t-1"), req).allowed
        result = guard.check(_caller(tenant_id=""), req)
        assert result.blocked
        assert result.reason == "tenant context required"


class TestConditionalRequirement:
    """Permission plus request-attribute conditions."""

    req = AccessRequirement(
        permission="CLIENTS_VIEW_OWN",
        conditions=(PermissionCondition(field="location", operator="eq", value="US"),),
    )

    def test_condition_met(self, guard: AccessGuard) -> None:
        ctx = RequestContext(user_id="u-1", tenant_id="t-1", location="US")
        assert guard.check(_caller(request=ctx), self.req).allowed

    def test_condition_not_met(self, guard: AccessGuard) -> None:
        ctx = RequestContext(user_id="u-1", tenant_id="t-1", location="UK")
        assert guard.check(_caller(request=ctx), self.req).blocked

    def test_missing_request_context(self, guard: AccessGuard) -> None:
        result = guard.check(_caller(), self.req)
        assert result.blocked
        assert "request context required" in result.reason

    def test_conditions_without_permission_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            AccessRequirement(
                permissions=("CLIENTS_VIEW_OWN",),
                conditions=(PermissionCondition(field="location", operator="eq", value="US"),),
            )


class TestEnforcementModes:
    """off / warn / enforce behaviour."""

    def test_default_is_enforce(self) -> None:
        assert AccessGuard().mode is EnforcementMode.ENFORCE

    def test_off_allows_everything(self) -> None:
        guard = AccessGuard(RBACConfig(enforcement="off"))
        result = guard.check(_caller("viewer"), AccessRequirement(permission="BILLING_MANAGE"))
        assert result.allowed
        assert result.reason == ""

    def test_warn_allows_and_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        guard = AccessGuard(RBACConfig(enforcement="warn"))
        with caplog.at_level(logging.WARNING, logger="crmaccess.guard"):
            result = guard.check(_caller("viewer"), AccessRequirement(permission="BILLING_MANAGE"))
        assert result.allowed
        assert result.reason == "missing permission: BILLING_MANAGE"
        assert "enforcement=warn" in caplog.text

    def test_enforce_logs_denial(self, guard: AccessGuard, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="crmaccess.guard"):
            guard.check(_caller("viewer"), AccessRequirement(permission="BILLING_MANAGE"))
        assert "Access denied" in caplog.text
        record = caplog.records[-1]
        assert record.tenant_id == "t-1"
        assert record.user_id == "u-1"
        assert record.role == "viewer"

    def test_processing_time_recorded(self, guard: AccessGuard) -> None:
        result = guard.check(_caller(), AccessRequirement(permission="CLIENTS_CREATE"))
        assert result.processing_ms >= 0


class TestStrictPermissions:
    """Unknown permission handling in the guard."""

    def test_lenient_denies(self, guard: AccessGuard) -> None:
        assert guard.check(_caller("owner"), AccessRequirement(permission="CLIENTS_FLY")).blocked

    def test_strict_raises(self) -> None:
        guard = AccessGuard(RBACConfig(strict_permissions=True))
        assert guard.strict is True
        with pytest.raises(UnknownPermissionError):
            guard.check(_caller("owner"), AccessRequirement(permission="CLIENTS_FLY"))


class TestSingleton:
    """get_access_guard / reset_access_guard."""

    def setup_method(self) -> None:
        reset_access_guard()

    def teardown_method(self) -> None:
        reset_access_guard()

    def test_same_instance(self) -> None:
        assert get_access_guard(RBACConfig()) is get_access_guard()

    def test_reset(self) -> None:
        first = get_access_guard(RBACConfig())
        reset_access_guard()
        assert get_access_guard(RBACConfig()) is not first

    def test_loads_from_env(self) -> None:
        with patch.dict("os.environ", {"RBAC_ENFORCEMENT": "warn"}, clear=True):
            guard = get_access_guard()
        assert guard.mode is EnforcementMode.WARN
