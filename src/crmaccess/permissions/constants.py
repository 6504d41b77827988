"""Permission vocabulary for the CRM.

Provides:
- ``ResourceKind`` — resources a permission can target (clients, deals, ...).
- ``ActionKind`` — operations on a resource (view, create, approve, ...).
- ``ScopeKind`` — ownership scope (own / team / tenant), ordered by breadth.
"""

from __future__ import annotations

from enum import Enum


class ResourceKind(str, Enum):
    """Resource families covered by the permission catalog.

    Values are the lowercase tokens used at call sites; permission keys
    use the uppercase form (``clients`` → ``CLIENTS``).
    """

    CLIENTS = "clients"
    DEALS = "deals"
    TASKS = "tasks"
    CONVERSATIONS = "conversations"
    COMMUNICATION = "communication"
    REPORTS = "reports"
    ANALYTICS = "analytics"
    MEMBERS = "members"
    SETTINGS = "settings"
    BILLING = "billing"
    INTEGRATIONS = "integrations"
    AUTOMATION = "automation"
    WORKFLOWS = "workflows"
    API_KEYS = "api_keys"
    LEAD_SCORING = "lead_scoring"
    MLS = "mls"
    AUDIT_LOGS = "audit_logs"

    @property
    def key(self) -> str:
        return self.value.upper()


class ActionKind(str, Enum):
    """Operations a permission grants on a resource."""

    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    INVITE = "invite"
    APPROVE = "approve"
    EXPORT = "export"
    ASSIGN = "assign"
    CONFIGURE = "configure"

    @property
    def key(self) -> str:
        return self.value.upper()


class ScopeKind(str, Enum):
    """Ownership scope of a permission.

    Breadth order: ``own`` < ``team`` < ``tenant``. The tenant scope is
    spelled ``ALL`` inside permission keys (``CLIENTS_VIEW_ALL``), and
    ``"all"`` is accepted as an alias when parsing tokens.
    """

    OWN = "own"
    TEAM = "team"
    TENANT = "tenant"

    @classmethod
    def _missing_(cls, value: object) -> ScopeKind | None:
        if isinstance(value, str):
            lowered = value.lower()
            if lowered == "all":
                return cls.TENANT
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def key(self) -> str:
        return _SCOPE_KEYS[self]

    @property
    def rank(self) -> int:
        return SCOPE_PRECEDENCE.index(self)


_SCOPE_KEYS = {
    ScopeKind.OWN: "OWN",
    ScopeKind.TEAM: "TEAM",
    ScopeKind.TENANT: "ALL",
}

# Narrowest first; broader scope implies stronger access
SCOPE_PRECEDENCE: tuple[ScopeKind, ...] = (ScopeKind.OWN, ScopeKind.TEAM, ScopeKind.TENANT)


__all__ = [
    "SCOPE_PRECEDENCE",
    "ActionKind",
    "ResourceKind",
    "ScopeKind",
]
