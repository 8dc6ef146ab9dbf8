"""ontoquery schema: inspect entity schemas of the loaded ontology."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer
import yaml

from ontoquery.cli import _exitcodes as ec
from ontoquery.cli._loader import open_ontology
from ontoquery.cli._output import print_error, print_table
from ontoquery.errors import EntityNotFoundError

app = typer.Typer(no_args_is_help=True)


@app.command(name="entities")
def schema_entities_cmd() -> None:
    """List the entities of the ontology."""
    from ontoquery.cli import state

    ontology = open_ontology()
    rows: list[list[Any]] = []
    for name in ontology.entity_names():
        schema = ontology.get_entity_schema(name)
        rows.append([name, schema.primary_table, len(schema.fields), len(schema.relations)])
    print_table(["entity", "table", "fields", "relations"], rows, json_mode=state.json_output)


@app.command(name="show")
def schema_show_cmd(
    entity: str = typer.Argument(..., help="Entity name"),
    output: Optional[str] = typer.Option(None, "--output", help="Output file path"),
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
) -> None:
    """Dump one entity schema as stored in the ontology document."""
    if fmt not in ("json", "yaml"):
        print_error("--format must be 'json' or 'yaml'")
        raise typer.Exit(ec.USAGE_ERROR)

    ontology = open_ontology()
    try:
        schema = ontology.get_entity_schema(entity)
    except EntityNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(ec.GENERAL_ERROR)

    data = schema.model_dump(mode="json", by_alias=True, exclude_none=True)
    _write_output(data, output, fmt)


def _write_output(data: dict[str, Any], output: str | None, fmt: str) -> None:
    """Write schema data to file or stdout."""
    if fmt == "yaml":
        content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    else:
        content = json.dumps(data, indent=2)

    if output:
        with open(output, "w") as f:
            f.write(content)
        print(f"Written to {output}")
    else:
        print(content)
