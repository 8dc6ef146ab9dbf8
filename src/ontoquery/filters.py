"""Filter trees for the query compiler and a small DSL to build them.

A filter tree is a FilterGroup: an operator (AND/OR), an ordered list of
Conditions and an ordered list of nested FilterGroups. Trees usually arrive as
JSON from callers:

    {"operator": "OR",
     "conditions": [{"field": "inn", "operator": "contains", "value": "77"}],
     "groups": [{"conditions": [{"field": "orders.status", "operator": "equals",
                                 "value": "open"}]}]}

and can also be built in code:

    (field_ref("inn").contains("77") | (field_ref("orders.status") == "open"))
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SEGMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _validate_segment(segment: str) -> None:
    """Validate a single path segment (identifier)."""
    if not _SEGMENT_RE.match(segment):
        raise ValueError(f"Invalid path segment '{segment}': must match [A-Za-z_][A-Za-z0-9_]*")


def _validate_path(path: str) -> None:
    """Validate a dotted path (one or more segments)."""
    if not path:
        raise ValueError("Path must not be empty")
    for segment in path.split("."):
        _validate_segment(segment)


NULL_EQ_ERROR = "Comparing a field with None is not supported in filter conditions."
NULL_NE_ERROR = NULL_EQ_ERROR


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class _Combinable:
    def __and__(self, other: FilterNode) -> FilterGroup:
        return _combine(LogicalOperator.AND, self, other)  # type: ignore[arg-type]

    def __or__(self, other: FilterNode) -> FilterGroup:
        return _combine(LogicalOperator.OR, self, other)  # type: ignore[arg-type]


class Condition(_Combinable, BaseModel):
    """One comparison: a field path, an operator name, and a raw value.

    The operator stays a plain string so that unknown operators are reported
    by the compiler rather than at parse time.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None


class FilterGroup(_Combinable, BaseModel):
    """Conditions and nested groups combined by one logical operator."""

    model_config = ConfigDict(frozen=True)

    operator: str = LogicalOperator.AND.value
    conditions: list[Condition] = Field(default_factory=list)
    groups: list[FilterGroup] = Field(default_factory=list)

    @field_validator("operator", mode="before")
    @classmethod
    def _default_operator(cls, value: Any) -> Any:
        return LogicalOperator.AND.value if value is None else value

    @field_validator("conditions", "groups", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def logical_operator(self) -> LogicalOperator:
        """OR when explicitly requested (any case), AND otherwise."""
        if isinstance(self.operator, str) and self.operator.strip().upper() == "OR":
            return LogicalOperator.OR
        return LogicalOperator.AND


FilterNode = Union[Condition, FilterGroup]


def _combine(op: LogicalOperator, lhs: FilterNode, rhs: FilterNode) -> FilterGroup:
    conditions: list[Condition] = []
    groups: list[FilterGroup] = []
    for node in (lhs, rhs):
        if isinstance(node, Condition):
            conditions.append(node)
        elif isinstance(node, FilterGroup):
            if node.logical_operator is op:
                conditions.extend(node.conditions)
                groups.extend(node.groups)
            else:
                groups.append(node)
        else:
            raise TypeError(f"Cannot combine filter with {type(node).__name__}")
    return FilterGroup(operator=op.value, conditions=conditions, groups=groups)


class FieldRef:
    """Builds Conditions from Python operators.

    Usage: field_ref("orders.amount") > 100
    """

    def __init__(self, path: str) -> None:
        _validate_path(path)
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def _cond(self, op: ConditionOperator, value: Any) -> Condition:
        return Condition(field=self._path, operator=op.value, value=value)

    def __eq__(self, other: object) -> Condition:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_EQ_ERROR)
        return self._cond(ConditionOperator.EQUALS, other)

    def __ne__(self, other: object) -> Condition:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_NE_ERROR)
        return self._cond(ConditionOperator.NOT_EQUALS, other)

    def __gt__(self, other: Any) -> Condition:
        return self._cond(ConditionOperator.GREATER_THAN, other)

    def __lt__(self, other: Any) -> Condition:
        return self._cond(ConditionOperator.LESS_THAN, other)

    def contains(self, substring: Any) -> Condition:
        return self._cond(ConditionOperator.CONTAINS, substring)

    def __getitem__(self, segment: str) -> FieldRef:
        """Navigate one relation/field segment further."""
        _validate_segment(segment)
        return FieldRef(f"{self._path}.{segment}")


def field_ref(path: str) -> FieldRef:
    """Create a FieldRef for a dotted field path."""
    return FieldRef(path)


def all_of(*nodes: FilterNode) -> FilterGroup:
    """AND-combine any number of conditions/groups (empty -> empty group)."""
    return _group(LogicalOperator.AND, nodes)


def any_of(*nodes: FilterNode) -> FilterGroup:
    """OR-combine any number of conditions/groups (empty -> empty group)."""
    return _group(LogicalOperator.OR, nodes)


def _group(op: LogicalOperator, nodes: tuple[FilterNode, ...]) -> FilterGroup:
    conditions = [n for n in nodes if isinstance(n, Condition)]
    groups = [n for n in nodes if isinstance(n, FilterGroup)]
    if len(conditions) + len(groups) != len(nodes):
        raise TypeError("all_of/any_of accept only Condition and FilterGroup arguments")
    return FilterGroup(operator=op.value, conditions=conditions, groups=groups)


FilterGroup.model_rebuild()
