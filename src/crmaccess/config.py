"""Configuration for crmaccess.

Pydantic-validated settings shared by the access guard and logging setup.
Direct os.environ/os.getenv usage is limited to ``load_config_from_env()``;
everything else receives an ``RBACConfig``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .roles.registry import ROLE_ALIASES, is_system_role_id


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnforcementMode(str, Enum):
    """Three-state enforcement toggle for the access guard.

    - ``off``     — no checks, every request allowed (local development only).
    - ``warn``    — evaluate requirements, log denials as WARNING, allow through.
    - ``enforce`` — evaluate requirements and deny on failure (production).
    """

    OFF = "off"
    WARN = "warn"
    ENFORCE = "enforce"


class RBACConfig(BaseModel):
    """Settings for permission enforcement and logging.

    Environment variables (see :func:`load_config_from_env`):
        LOG_LEVEL                — logging level (default: INFO)
        LOG_JSON                 — JSON log lines (default: false)
        SERVICE_NAME             — service name for log records
        RBAC_ENFORCEMENT         — off | warn | enforce (default: enforce)
        RBAC_STRICT_PERMISSIONS  — raise on permission keys outside the catalog
        RBAC_DEFAULT_ROLE        — system role for members without one (default: viewer)
    """

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name attached to log output",
    )
    enforcement: EnforcementMode = Field(
        default=EnforcementMode.ENFORCE,
        description="Access guard enforcement mode",
    )
    strict_permissions: bool = Field(
        default=False,
        description="Reject unknown permission keys instead of treating them as never granted",
    )
    default_role: str = Field(
        default="viewer",
        description="System role assumed for members without an explicit role",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("enforcement", mode="before")
    @classmethod
    def validate_enforcement(cls, v: str | EnforcementMode) -> EnforcementMode:
        if isinstance(v, EnforcementMode):
            return v
        if isinstance(v, str):
            try:
                return EnforcementMode(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid enforcement mode: {v}. Must be one of {[e.value for e in EnforcementMode]}")
        raise ValueError(f"Enforcement mode must be string or EnforcementMode enum, got {type(v)}")

    @field_validator("default_role")
    @classmethod
    def validate_default_role(cls, v: str) -> str:
        """Default role must name a system role (aliases resolve)."""
        if not is_system_role_id(v):
            raise ValueError(f"Default role must be a system role, got {v!r}")
        return ROLE_ALIASES.get(v, v)

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> RBACConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for these settings.

    Returns:
        RBACConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    import os

    try:
        return RBACConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
            service_name=os.getenv("SERVICE_NAME"),
            enforcement=os.getenv("RBAC_ENFORCEMENT", "enforce"),
            strict_permissions=os.getenv("RBAC_STRICT_PERMISSIONS", "false").lower() in _TRUTHY,
            default_role=os.getenv("RBAC_DEFAULT_ROLE", "viewer"),
        )
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid RBAC configuration in environment: {e.error_count()} error(s)",
            errors=[err["loc"] for err in e.errors()],
        ) from e


__all__ = [
    "EnforcementMode",
    "LogLevel",
    "RBACConfig",
    "load_config_from_env",
]
