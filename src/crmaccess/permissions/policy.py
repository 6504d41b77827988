"""Contextual policy evaluation: attribute conditions on top of role grants.

Provides:
- ``ConditionOperator`` — supported operators (eq / ne / in).
- ``DeviceType`` — device classes reported by clients.
- ``RequestContext`` — request attributes conditions are evaluated against.
- ``PermissionCondition`` — one ``field``/``operator``/``value`` triple.
- ``has_contextual_permission()`` — role check plus conditions.

Conditions only ever restrict. A role grant is required first, and
every condition must then pass. Anything malformed (unknown field,
missing value, unknown operator) evaluates to False.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .checker import PermissionLike, has_permission

logger = logging.getLogger(__name__)


class ConditionOperator(str, Enum):
    """Operators understood by the evaluator.

    - ``eq`` — context value equals ``value`` (exact, case-sensitive)
    - ``ne`` — context value differs from ``value``
    - ``in`` — context value is a member of ``value`` (a list/tuple/set)
    """

    EQ = "eq"
    NE = "ne"
    IN = "in"


class DeviceType(str, Enum):
    MOBILE = "mobile"
    DESKTOP = "desktop"
    TABLET = "tablet"


class RequestContext(BaseModel):
    """Attributes of the current request, populated by the route layer.

    Field names accept both snake_case and camelCase
    (``device_type`` / ``deviceType``), both on construction and in
    condition ``field`` names.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
        extra="forbid",
    )

    user_id: str
    tenant_id: str
    team_ids: frozenset[str] = Field(default_factory=frozenset)
    location: Optional[str] = None
    device_type: Optional[DeviceType] = None
    time_zone: Optional[str] = None
    ip_address: Optional[str] = None

    def lookup(self, field: str) -> tuple[bool, Any]:
        """Resolve a condition field name to its value.

        Returns:
            ``(found, value)``. ``found`` is False for names that are not
            context attributes, and for attributes left unset (None).
        """
        name = _FIELD_NAMES.get(field)
        if name is None:
            return False, None
        value = getattr(self, name)
        if value is None:
            return False, None
        return True, value


_FIELD_NAMES: dict[str, str] = {}
for _name, _info in RequestContext.model_fields.items():
    _FIELD_NAMES[_name] = _name
    if _info.alias:
        _FIELD_NAMES[_info.alias] = _name


class PermissionCondition(BaseModel):
    """A single attribute condition.

    ``operator`` stays a plain string so an unsupported operator is kept
    as given and fails closed when evaluated, rather than at parse time.

    Example::

        PermissionCondition(field="location", operator="eq", value="US")
        PermissionCondition(field="deviceType", operator="ne", value="mobile")
        PermissionCondition(field="location", operator="in", value=["US", "CA"])
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None


ConditionLike = Union[PermissionCondition, Mapping[str, Any]]


def _same(left: Any, right: Any) -> bool:
    # bool is an int subclass; True must not equal 1
    if isinstance(left, bool) is not isinstance(right, bool):
        return False
    return left == right


def _as_condition(condition: ConditionLike) -> PermissionCondition | None:
    if isinstance(condition, PermissionCondition):
        return condition
    try:
        return PermissionCondition.model_validate(condition)
    except ValidationError as e:
        logger.warning("Malformed permission condition %r: %s", condition, e.error_count())
        return None


def evaluate_condition(condition: ConditionLike, context: RequestContext) -> bool:
    """Evaluate one condition against ``context``. Fails closed."""
    parsed = _as_condition(condition)
    if parsed is None:
        return False

    try:
        operator = ConditionOperator(parsed.operator)
    except ValueError:
        logger.warning("Unsupported condition operator %r on field %r", parsed.operator, parsed.field)
        return False

    found, actual = context.lookup(parsed.field)
    if not found:
        logger.debug("Condition field %r not present on request context", parsed.field)
        return False

    if operator is ConditionOperator.EQ:
        return _same(actual, parsed.value)
    if operator is ConditionOperator.NE:
        return not _same(actual, parsed.value)
    # ConditionOperator.IN
    if not isinstance(parsed.value, (list, tuple, set, frozenset)):
        return False
    return any(_same(actual, candidate) for candidate in parsed.value)


def evaluate_conditions(conditions: Iterable[ConditionLike], context: RequestContext) -> bool:
    """Evaluate every condition (no short-circuit) and AND the results."""
    results = [evaluate_condition(condition, context) for condition in conditions]
    return all(results)


def has_contextual_permission(
    permissions: Iterable[PermissionLike],
    permission: PermissionLike,
    context: RequestContext,
    conditions: Iterable[ConditionLike] | None = None,
    *,
    strict: bool = False,
) -> bool:
    """Check a role permission, then apply attribute conditions.

    Decision logic:
    1. Caller lacks ``permission`` → False (conditions never grant).
    2. No conditions → True.
    3. Otherwise → True only if every condition passes.

    Args:
        permissions: Caller's permission strings.
        permission: Required permission key.
        context: Attributes of the current request.
        conditions: Optional conditions defined at the call site.
        strict: Passed to :func:`has_permission`.

    Example::

        ctx = RequestContext(user_id="u1", tenant_id="t1", location="US")
        us_only = [PermissionCondition(field="location", operator="eq", value="US")]
        has_contextual_permission(["CLIENTS_VIEW_OWN"], "CLIENTS_VIEW_OWN", ctx, us_only)  # True
        has_contextual_permission(["CLIENTS_VIEW_OWN"], "DEALS_CREATE", ctx)               # False
    """
    if not has_permission(permissions, permission, strict=strict):
        return False

    condition_list = list(conditions or ())
    if not condition_list:
        return True

    return evaluate_conditions(condition_list, context)


__all__ = [
    "ConditionLike",
    "ConditionOperator",
    "DeviceType",
    "PermissionCondition",
    "RequestContext",
    "evaluate_condition",
    "evaluate_conditions",
    "has_contextual_permission",
]
