"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any

from ontoquery.context import QueryResult


def print_table(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print data as a table (text) or JSON array."""
    if json_mode:
        data = [dict(zip(headers, row)) for row in rows]
        print(json.dumps(data, indent=2, default=str))
        return

    if not rows:
        return

    str_rows = [["" if v is None else str(v) for v in row] for row in rows]
    widths = [max([len(h)] + [len(r[i]) for r in str_rows]) for i, h in enumerate(headers)]

    print("  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)))
    print("  ".join("-" * w for w in widths))
    for row in str_rows:
        print("  ".join(val.ljust(widths[i]) for i, val in enumerate(row)).rstrip())


def print_object(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a mapping as JSON or key-value pairs."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return

    for k, v in data.items():
        print(f"{k}: {v}")


def print_query_result(result: QueryResult, *, json_mode: bool = False) -> None:
    """Print compiled SQL with its parameters (and projected columns, if any)."""
    if json_mode:
        payload: dict[str, Any] = {"sql": result.sql, "params": result.params}
        if result.selected_fields:
            payload["columns"] = [
                {"path": f.full_path, "alias": f.column_alias, "column": f.qualified_column}
                for f in result.selected_fields
            ]
        print(json.dumps(payload, indent=2, default=str))
        return

    print(result.sql)
    if result.params:
        print()
        print("Parameters:")
        for name, value in result.params.items():
            print(f"  :{name} = {value!r}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)
