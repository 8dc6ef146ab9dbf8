"""ontoquery CLI: inspect an ontology and compile entity requests to SQL."""

from __future__ import annotations

from typing import Optional

import typer

from ontoquery.cli import compile_cmd, schema

app = typer.Typer(
    name="ontoquery",
    help="ontoquery CLI: inspect ontologies and print the SQL compiled for entity requests.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    ontology: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        from ontoquery import __version__

        print(f"ontoquery {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    ontology: Optional[str] = typer.Option(
        None,
        "--ontology",
        "-o",
        envvar="ONTOQUERY_ONTOLOGY",
        help="Ontology document (JSON or YAML)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all ontoquery commands."""
    state.ontology = ontology
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.add_typer(schema.app, name="schema", help="Inspect entity schemas")
app.add_typer(compile_cmd.app, name="compile", help="Compile entity requests to SQL")


def main() -> None:
    """Entry point for the ontoquery CLI."""
    app()
