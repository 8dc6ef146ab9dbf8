"""ontoquery compile: print the SQL and parameters compiled for an entity request."""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

import typer
from pydantic import ValidationError

from ontoquery.builder import QueryBuilder
from ontoquery.cli import _exitcodes as ec
from ontoquery.cli._filters import (
    load_query_file,
    parse_assignments,
    parse_cli_filters,
    split_filter_arg,
)
from ontoquery.cli._loader import open_ontology
from ontoquery.cli._output import print_error, print_query_result
from ontoquery.context import QueryResult
from ontoquery.errors import QueryBuildError
from ontoquery.filters import FilterGroup

app = typer.Typer(no_args_is_help=True)

_FILTER_HELP = "'PATH OP VALUE' with OP one of eq, ne, gt, lt, contains (repeatable)"


@app.command(name="list")
def compile_list_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    fields: Optional[list[str]] = typer.Option(
        None, "--field", "-f", help="Field path to select (repeatable; default: all fields)"
    ),
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
    match_any: bool = typer.Option(False, "--any", help="OR the filters instead of AND"),
    query_file: Optional[str] = typer.Option(None, "--query-file", help="JSON filter tree"),
    page: int = typer.Option(1, "--page", help="1-based page number"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Rows per page"),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Field path to sort by"),
    sort_dir: str = typer.Option("ASC", "--sort-dir", help="ASC or DESC"),
) -> None:
    """Compile a paginated list query."""
    query = _read_query(filter_args, match_any, query_file)
    builder = _open_builder()
    _emit(
        lambda: builder.build_list(
            entity,
            fields,
            query,
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
    )


@app.command(name="count")
def compile_count_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
    match_any: bool = typer.Option(False, "--any", help="OR the filters instead of AND"),
    query_file: Optional[str] = typer.Option(None, "--query-file", help="JSON filter tree"),
) -> None:
    """Compile a count query."""
    query = _read_query(filter_args, match_any, query_file)
    builder = _open_builder()
    _emit(lambda: builder.build_count(entity, query))


@app.command(name="single")
def compile_single_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    fields: Optional[list[str]] = typer.Option(
        None, "--field", "-f", help="Field path to select (repeatable; default: all fields)"
    ),
    where: Optional[list[str]] = typer.Option(
        None, "--where", help="FIELD=VALUE equality filter (repeatable)"
    ),
) -> None:
    """Compile a single-row lookup."""
    filters = parse_assignments(where)
    builder = _open_builder()
    _emit(lambda: builder.build_single(entity, fields, filters))


@app.command(name="find-id")
def compile_find_id_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    filter_args: Optional[list[str]] = typer.Option(None, "--filter", help=_FILTER_HELP),
    match_any: bool = typer.Option(False, "--any", help="OR the filters instead of AND"),
    query_file: Optional[str] = typer.Option(None, "--query-file", help="JSON filter tree"),
) -> None:
    """Compile a lookup of the primary key of the single matching row."""
    query = _read_query(filter_args, match_any, query_file)
    builder = _open_builder()
    _emit(lambda: builder.build_find_single_id(entity, query))


@app.command(name="insert")
def compile_insert_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    set_opts: Optional[list[str]] = typer.Option(
        None, "--set", help="FIELD=VALUE to insert (repeatable)"
    ),
) -> None:
    """Compile an INSERT."""
    values = parse_assignments(set_opts)
    builder = _open_builder()
    _emit(lambda: builder.build_insert(entity, values))


@app.command(name="update")
def compile_update_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    set_opts: Optional[list[str]] = typer.Option(
        None, "--set", help="FIELD=VALUE to update (repeatable)"
    ),
    id_field: Optional[str] = typer.Option(
        None, "--id-field", help="Field matched against :id_param (default: primary key)"
    ),
) -> None:
    """Compile an UPDATE by id."""
    values = parse_assignments(set_opts)
    builder = _open_builder()
    _emit(lambda: builder.build_update(entity, values, id_field))


@app.command(name="delete")
def compile_delete_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    id_field: Optional[str] = typer.Option(
        None, "--id-field", help="Field matched against :id_param (default: primary key)"
    ),
) -> None:
    """Compile a DELETE by id."""
    builder = _open_builder()
    _emit(lambda: builder.build_delete(entity, id_field))


def _open_builder() -> QueryBuilder:
    return QueryBuilder(open_ontology())


def _emit(build: Callable[[], QueryResult]) -> None:
    from ontoquery.cli import state

    try:
        result = build()
    except QueryBuildError as e:
        print_error(str(e))
        raise typer.Exit(ec.COMPILATION_ERROR)
    print_query_result(result, json_mode=state.json_output)


def _read_query(
    filter_args: list[str] | None, match_any: bool, query_file: str | None
) -> FilterGroup | None:
    """Build the filter tree from --filter options or a --query-file."""
    if filter_args and query_file:
        print_error("--filter and --query-file are exclusive")
        raise typer.Exit(ec.USAGE_ERROR)

    if query_file:
        try:
            return load_query_file(query_file)
        except OSError as e:
            print_error(f"Cannot read query file: {e}")
            raise typer.Exit(ec.GENERAL_ERROR)
        except (ValueError, ValidationError) as e:
            print_error(f"Invalid query file: {e}")
            raise typer.Exit(ec.USAGE_ERROR)

    try:
        triples = [split_filter_arg(arg) for arg in filter_args or []]
        return parse_cli_filters(triples, match_any=match_any)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
