"""Ontology loader for CLI commands."""

from __future__ import annotations

import typer

from ontoquery.cli import _exitcodes as ec
from ontoquery.cli._output import print_error
from ontoquery.errors import OntologyLoadError
from ontoquery.ontology import StaticOntology, load_ontology


def open_ontology() -> StaticOntology:
    """Load the ontology named by --ontology / ONTOQUERY_ONTOLOGY."""
    from ontoquery.cli import state

    if not state.ontology:
        print_error("An ontology is required: pass --ontology or set ONTOQUERY_ONTOLOGY")
        raise typer.Exit(ec.USAGE_ERROR)

    try:
        return load_ontology(state.ontology)
    except OntologyLoadError as e:
        print_error(str(e))
        raise typer.Exit(ec.GENERAL_ERROR)
