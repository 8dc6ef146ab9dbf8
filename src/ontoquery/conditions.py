"""Compilation of filter trees into parenthesized, parameterized SQL."""

from __future__ import annotations

from typing import Any

from ontoquery.context import FieldInfo, QueryContext
from ontoquery.errors import InvalidConditionError, QueryBuildError, UnsupportedOperatorError
from ontoquery.filters import Condition, ConditionOperator, FilterGroup
from ontoquery.resolver import PathResolver
from ontoquery.values import convert_value

_COMPARISONS: dict[ConditionOperator, str] = {
    ConditionOperator.EQUALS: "=",
    ConditionOperator.NOT_EQUALS: "!=",
    ConditionOperator.GREATER_THAN: ">",
    ConditionOperator.LESS_THAN: "<",
}


def _parse_operator(raw: Any) -> ConditionOperator:
    if isinstance(raw, ConditionOperator):
        return raw
    try:
        return ConditionOperator(str(raw).strip().lower())
    except ValueError:
        raise UnsupportedOperatorError(str(raw)) from None


class ConditionCompiler:
    """Turns a FilterGroup into one SQL boolean expression.

    Joins and parameters are registered in the QueryContext as field paths
    are resolved. An empty tree compiles to an empty string.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    def compile(self, node: FilterGroup, ctx: QueryContext) -> str:
        fragments: list[str] = []

        for condition in node.conditions:
            fragments.append(self._compile_condition(condition, ctx))

        for group in node.groups:
            fragment = self.compile(group, ctx)
            if fragment:
                fragments.append(fragment)

        if not fragments:
            return ""
        joiner = f" {node.logical_operator.value} "
        return f"({joiner.join(fragments)})"

    def _compile_condition(self, condition: Condition, ctx: QueryContext) -> str:
        try:
            op = _parse_operator(condition.operator)
            info = self._resolver.resolve(condition.field, ctx)
            field_schema = self._resolver.locate_field(info.full_path, ctx.root_schema)
            param = ctx.next_param_name(info.column_alias)
            typed_value = convert_value(condition.value, field_schema.type)
        except QueryBuildError as e:
            raise InvalidConditionError(condition.field, e) from e

        if op is ConditionOperator.CONTAINS:
            ctx.bind(param, f"%{_raw_text(condition.value, typed_value)}%")
            return f"CAST({info.qualified_column} AS TEXT) ILIKE :{param}"

        ctx.bind(param, typed_value)
        return f"{info.qualified_column} {_COMPARISONS[op]} :{param}"


def _raw_text(raw: Any, typed_value: Any) -> str:
    if typed_value is None:
        return "null"
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def compile_equality(info: FieldInfo, value: Any, logical_type: str, ctx: QueryContext) -> str:
    """Compile ``alias.column = :param`` for single-row lookups."""
    param = ctx.next_param_name(info.column_alias)
    ctx.bind(param, convert_value(value, logical_type))
    return f"{info.qualified_column} = :{param}"
