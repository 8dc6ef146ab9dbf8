"""CLI input parsers: filter triples and FIELD=VALUE assignments."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

from ontoquery.filters import Condition, ConditionOperator, FilterGroup, LogicalOperator

# Map CLI operator tokens to condition operators
_OP_MAP: dict[str, ConditionOperator] = {
    "eq": ConditionOperator.EQUALS,
    "ne": ConditionOperator.NOT_EQUALS,
    "gt": ConditionOperator.GREATER_THAN,
    "lt": ConditionOperator.LESS_THAN,
    "contains": ConditionOperator.CONTAINS,
}
_OP_MAP.update({op.value: op for op in ConditionOperator})
_SHORT_TOKENS = ("eq", "ne", "gt", "lt", "contains")


def split_filter_arg(arg: str) -> tuple[str, str, str]:
    """Split one ``--filter`` value of the form 'PATH OP VALUE'."""
    parts = arg.split(None, 2)
    if len(parts) != 3:
        raise ValueError(f"Invalid filter (expected 'PATH OP VALUE'): {arg}")
    return parts[0], parts[1], parts[2]


def parse_cli_filters(
    triples: list[tuple[str, str, str]], *, match_any: bool = False
) -> FilterGroup | None:
    """Parse CLI filter triples (PATH, OP, VALUE) into a FilterGroup.

    Filters are AND-combined, or OR-combined when ``match_any`` is set. Values
    stay raw text; the compiler converts them to each field's type.
    """
    if not triples:
        return None

    conditions: list[Condition] = []
    for path, op_token, value in triples:
        op = _OP_MAP.get(op_token.lower())
        if op is None:
            raise ValueError(
                f"Unknown filter operator '{op_token}'. "
                f"Valid operators: {', '.join(_SHORT_TOKENS)}"
            )
        conditions.append(Condition(field=path, operator=op.value, value=value))

    operator = LogicalOperator.OR if match_any else LogicalOperator.AND
    return FilterGroup(operator=operator.value, conditions=conditions)


def load_query_file(path: str) -> FilterGroup:
    """Read a JSON filter tree from a file."""
    data: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("query file must contain a JSON object")
    return FilterGroup.model_validate(data)


def parse_assignments(items: list[str] | None) -> dict[str, str]:
    """Parse FIELD=VALUE options."""
    if not items:
        return {}
    result: dict[str, str] = {}
    for item in items:
        if "=" not in item:
            raise typer.BadParameter(f"Invalid assignment (expected FIELD=VALUE): {item}")
        k, v = item.split("=", 1)
        result[k.strip()] = v
    return result
