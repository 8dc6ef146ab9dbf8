"""Final SQL text assembly from a populated QueryContext.

Every identifier rendered here (tables, columns, aliases) comes from ontology
metadata or from the context's own alias generator; caller-supplied values
only ever appear as ``:name`` placeholders.
"""

from __future__ import annotations

from ontoquery.context import QueryContext
from ontoquery.errors import EmptyProjectionError

ID_PARAM = "id_param"


def _lines(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def _select_clause(ctx: QueryContext) -> str:
    if not ctx.select_fields:
        raise EmptyProjectionError(ctx.root_schema.name)
    columns = ", ".join(f"{f.qualified_column} AS {f.column_alias}" for f in ctx.select_fields)
    return f"SELECT {columns}"


def _from_clause(ctx: QueryContext) -> str:
    return f"FROM {ctx.root_schema.primary_table} {ctx.root_alias}"


def _join_clauses(ctx: QueryContext) -> str:
    return "\n".join(ctx.join_clauses.values())


def _where_clause(ctx: QueryContext) -> str:
    if not ctx.where_clauses:
        return ""
    return "WHERE " + " AND ".join(ctx.where_clauses)


def render_list(ctx: QueryContext, order_by: list[str], limit: int, offset: int) -> str:
    order_clause = f"ORDER BY {', '.join(order_by)}" if order_by else ""
    return _lines(
        _select_clause(ctx),
        _from_clause(ctx),
        _join_clauses(ctx),
        _where_clause(ctx),
        order_clause,
        f"LIMIT {int(limit)} OFFSET {int(offset)}",
    )


def render_single(ctx: QueryContext) -> str:
    return _lines(
        _select_clause(ctx),
        _from_clause(ctx),
        _join_clauses(ctx),
        _where_clause(ctx),
        "LIMIT 1",
    )


def render_count(ctx: QueryContext, primary_key_column: str | None) -> str:
    """COUNT(*) without joins; COUNT(DISTINCT root.pk) once any join exists."""
    if ctx.has_joins:
        if primary_key_column is None:
            raise ValueError("primary_key_column is required when the query has joins")
        expression = f"COUNT(DISTINCT {ctx.root_alias}.{primary_key_column})"
    else:
        expression = "COUNT(*)"
    return _lines(
        f"SELECT {expression}",
        _from_clause(ctx),
        _join_clauses(ctx),
        _where_clause(ctx),
    )


def render_find_single_id(ctx: QueryContext, primary_key_column: str) -> str:
    # two rows are enough to tell "exactly one" from "ambiguous"
    return _lines(
        f"SELECT {ctx.root_alias}.{primary_key_column}",
        _from_clause(ctx),
        _join_clauses(ctx),
        _where_clause(ctx),
        "LIMIT 2",
    )


def render_insert(table: str, columns: list[str], param_names: list[str]) -> str:
    placeholders = ", ".join(f":{p}" for p in param_names)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


def render_update(table: str, assignments: list[tuple[str, str]], id_column: str) -> str:
    set_clause = ", ".join(f"{column} = :{param}" for column, param in assignments)
    return f"UPDATE {table} SET {set_clause} WHERE {id_column} = :{ID_PARAM}"


def render_delete(table: str, id_column: str) -> str:
    return f"DELETE FROM {table} WHERE {id_column} = :{ID_PARAM}"
