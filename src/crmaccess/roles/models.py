"""Role data models.

A role is either a built-in ``SystemRole`` (shared by every tenant,
immutable, never tenant-scoped) or a tenant-defined ``CustomRole``.
``Role`` is the discriminated union of the two.

Both serialize to the shape route handlers and the UI agree on via
``as_record()``::

    {"id", "name", "description", "permissions", "isSystem", "tenantId", "color", "icon"}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..permissions.catalog import validate_permissions


class SystemRole(BaseModel):
    """Built-in role available in every tenant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["system"] = "system"
    id: str
    name: str
    description: str
    permissions: tuple[str, ...]
    color: Optional[str] = None
    icon: Optional[str] = None

    @field_validator("permissions")
    @classmethod
    def validate_catalog_permissions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        unknown = validate_permissions(v)
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}")
        return v

    @property
    def is_system(self) -> bool:
        return True

    @property
    def tenant_id(self) -> None:
        return None

    def as_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": list(self.permissions),
            "isSystem": True,
            "tenantId": None,
            "color": self.color,
            "icon": self.icon,
        }


class CustomRole(BaseModel):
    """Tenant-defined role.

    Permissions are not re-validated here: rows loaded from storage are
    taken as stored. Validation happens when a role is created or
    updated (see :mod:`crmaccess.roles.registry`).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["custom"] = "custom"
    id: str
    tenant_id: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    permissions: tuple[str, ...] = ()
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True

    @property
    def is_system(self) -> bool:
        return False

    @classmethod
    def from_record(cls, row: Mapping[str, Any]) -> CustomRole:
        """Build from a storage row (``tenant_roles`` columns).

        Unknown columns (``created_at``, ``created_by``, ...) are ignored
        and null ``permissions`` / ``is_active`` columns become an empty
        tuple and an active role.
        """
        return cls(
            id=str(row["id"]),
            tenant_id=str(row["tenant_id"]),
            name=row["name"],
            description=row.get("description"),
            permissions=tuple(row.get("permissions") or ()),
            color=row.get("color"),
            icon=row.get("icon"),
            is_active=row.get("is_active") is not False,
        )

    def as_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": list(self.permissions),
            "isSystem": False,
            "tenantId": self.tenant_id,
            "color": self.color,
            "icon": self.icon,
        }


Role = Annotated[Union[SystemRole, CustomRole], Field(discriminator="kind")]


class CustomRoleDraft(BaseModel):
    """Payload for creating a custom role."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    permissions: list[str] = Field(min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None


class CustomRoleUpdate(BaseModel):
    """Partial update for a custom role; only fields that were set are applied."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    permissions: Optional[list[str]] = Field(default=None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None


__all__ = [
    "CustomRole",
    "CustomRoleDraft",
    "CustomRoleUpdate",
    "Role",
    "SystemRole",
]
