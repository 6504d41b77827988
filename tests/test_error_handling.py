"""Tests for the crmaccess exception hierarchy and error mapping."""

from __future__ import annotations

import pytest

from crmaccess.exceptions import (
    ConfigurationError,
    CRMAccessError,
    InvalidPermissionError,
    PermissionCatalogError,
    RoleConflictError,
    RoleError,
    RoleInUseError,
    RoleNotFoundError,
    RoleValidationError,
    SystemRoleImmutableError,
    UnknownPermissionError,
    error_registry,
    get_http_status_code,
    register_error,
)


class TestExceptionHierarchy:
    """Codes, messages and inheritance."""

    def test_base_defaults(self) -> None:
        error = CRMAccessError()
        assert error.code == "INTERNAL_ERROR"
        assert error.message == "An internal error occurred"
        assert error.details == {}

    def test_details_kept(self) -> None:
        error = RoleInUseError("Role in use", role_id="r-1", assigned_members=2)
        assert str(error) == "Role in use"
        assert error.details == {"role_id": "r-1", "assigned_members": 2}

    def test_code_override(self) -> None:
        assert RoleError("x", code="CUSTOM").code == "CUSTOM"

    @pytest.mark.parametrize(
        ("error_cls", "parent", "code"),
        [
            (InvalidPermissionError, PermissionCatalogError, "INVALID_PERMISSION"),
            (UnknownPermissionError, PermissionCatalogError, "UNKNOWN_PERMISSION"),
            (RoleValidationError, RoleError, "INVALID_ROLE"),
            (RoleConflictError, RoleError, "ROLE_CONFLICT"),
            (RoleInUseError, RoleError, "ROLE_IN_USE"),
            (RoleNotFoundError, RoleError, "ROLE_NOT_FOUND"),
            (SystemRoleImmutableError, RoleError, "SYSTEM_ROLE_IMMUTABLE"),
            (ConfigurationError, CRMAccessError, "CONFIGURATION_ERROR"),
        ],
    )
    def test_codes(self, error_cls: type[CRMAccessError], parent: type[CRMAccessError], code: str) -> None:
        error = error_cls("boom")
        assert isinstance(error, parent)
        assert isinstance(error, CRMAccessError)
        assert error.code == code
        assert error_registry.get(code) is error_cls


class TestErrorRegistry:
    """Custom error registration."""

    def test_register_error(self) -> None:
        @register_error("TEAM_SCOPE_ERROR")
        class TeamScopeError(CRMAccessError):
            code = "TEAM_SCOPE_ERROR"

        assert error_registry.get("TEAM_SCOPE_ERROR") is TeamScopeError
        assert "TEAM_SCOPE_ERROR" in error_registry.all()

    def test_unknown_code(self) -> None:
        assert error_registry.get("NOT_A_CODE") is None


class TestHttpStatus:
    """HTTP status mapping."""

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (InvalidPermissionError("x"), 400),
            (UnknownPermissionError("x"), 400),
            (RoleValidationError("x"), 400),
            (RoleConflictError("x"), 409),
            (RoleInUseError("x"), 409),
            (RoleNotFoundError("x"), 404),
            (SystemRoleImmutableError("x"), 403),
            (ConfigurationError("x"), 500),
            (CRMAccessError("x"), 500),
        ],
    )
    def test_status(self, error: CRMAccessError, status: int) -> None:
        assert get_http_status_code(error) == status

    def test_unmapped_code(self) -> None:
        assert get_http_status_code(CRMAccessError("x", code="SOMETHING_ELSE")) == 500
