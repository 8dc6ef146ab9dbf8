"""Configuration for the ontoquery compiler."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class QueryEngineConfig:
    """Configuration for query compilation."""

    table_alias_prefix: str = "t"
    param_prefix: str = "param"
    join_alias_placeholder: str = "targetAlias"
    default_page_size: int = 20
    max_page_size: int = 1000
    max_path_depth: int = 16
