"""Unified exception hierarchy for crmaccess.

All errors inherit from CRMAccessError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- HTTP status mapping for callers that translate errors into responses

Usage in route handlers:
    from crmaccess.exceptions import (
        CRMAccessError,
        RoleConflictError,
        get_http_status_code,
    )

Authorization checks never raise for a denied decision; they return False.
These errors cover malformed input (strict mode) and custom-role administration.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "CRMAccessError",
    "ConfigurationError",
    "PermissionCatalogError",
    "InvalidPermissionError",
    "UnknownPermissionError",
    "RoleError",
    "RoleValidationError",
    "RoleConflictError",
    "RoleInUseError",
    "RoleNotFoundError",
    "SystemRoleImmutableError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Protocol helpers
    "get_http_status_code",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class CRMAccessError(Exception):
    """Base exception for crmaccess.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "ROLE_CONFLICT").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(CRMAccessError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class PermissionCatalogError(CRMAccessError):
    """A permission could not be resolved against the catalog."""

    code: str = "PERMISSION_ERROR"


class InvalidPermissionError(PermissionCatalogError):
    """Resource, action or scope token is not part of the vocabulary."""

    code: str = "INVALID_PERMISSION"


class UnknownPermissionError(PermissionCatalogError):
    """Well-formed permission key that the catalog does not define."""

    code: str = "UNKNOWN_PERMISSION"


class RoleError(CRMAccessError):
    """Custom-role administration failure."""

    code: str = "ROLE_ERROR"


class RoleValidationError(RoleError):
    """Role payload failed validation (e.g. permissions outside the catalog)."""

    code: str = "INVALID_ROLE"


class RoleConflictError(RoleError):
    """Role name already used by another active role in the tenant."""

    code: str = "ROLE_CONFLICT"


class RoleInUseError(RoleError):
    """Role is still assigned to tenant members."""

    code: str = "ROLE_IN_USE"


class RoleNotFoundError(RoleError):
    code: str = "ROLE_NOT_FOUND"


class SystemRoleImmutableError(RoleError):
    """System roles are built in and cannot be edited or deleted."""

    code: str = "SYSTEM_ROLE_IMMUTABLE"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[CRMAccessError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[CRMAccessError]] = {}

    def register(self, code: str, error_cls: type[CRMAccessError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[CRMAccessError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[CRMAccessError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("TEAM_SCOPE_ERROR")
        class TeamScopeError(CRMAccessError):
            code = "TEAM_SCOPE_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", CRMAccessError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("PERMISSION_ERROR", PermissionCatalogError)
error_registry.register("INVALID_PERMISSION", InvalidPermissionError)
error_registry.register("UNKNOWN_PERMISSION", UnknownPermissionError)
error_registry.register("ROLE_ERROR", RoleError)
error_registry.register("INVALID_ROLE", RoleValidationError)
error_registry.register("ROLE_CONFLICT", RoleConflictError)
error_registry.register("ROLE_IN_USE", RoleInUseError)
error_registry.register("ROLE_NOT_FOUND", RoleNotFoundError)
error_registry.register("SYSTEM_ROLE_IMMUTABLE", SystemRoleImmutableError)


# ---- HTTP Mapping -----------------------------------------------------------

_ERROR_TO_STATUS: dict[str, int] = {
    "CONFIGURATION_ERROR": 500,
    "PERMISSION_ERROR": 400,
    "INVALID_PERMISSION": 400,
    "UNKNOWN_PERMISSION": 400,
    "ROLE_ERROR": 400,
    "INVALID_ROLE": 400,
    "ROLE_CONFLICT": 409,
    "ROLE_IN_USE": 409,
    "ROLE_NOT_FOUND": 404,
    "SYSTEM_ROLE_IMMUTABLE": 403,
}


def get_http_status_code(error: CRMAccessError) -> int:
    """Map CRMAccessError to an HTTP status code.

    Unmapped codes (including custom registered ones) map to 500.
    """
    status = _ERROR_TO_STATUS.get(error.code)
    if status is None:
        logger.debug("No HTTP status mapped for error code %s", error.code)
        return 500
    return status
