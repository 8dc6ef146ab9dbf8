"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from ontoquery.cli import app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def ontology_file(tmp_path, ontology_data):
    """Write the sample ontology to a JSON file."""
    path = tmp_path / "ontology.json"
    path.write_text(json.dumps(ontology_data))
    return str(path)


@pytest.fixture
def invoke(runner, ontology_file):
    """Invoke the CLI against the sample ontology."""

    def _invoke(args: list[str], *, json_mode: bool = False) -> "Result":
        prefix = ["--ontology", ontology_file]
        if json_mode:
            prefix.append("--json")
        return runner.invoke(app, prefix + args, catch_exceptions=False)

    return _invoke
