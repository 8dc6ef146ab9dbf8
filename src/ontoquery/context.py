"""Per-compilation state: QueryContext, FieldInfo, QueryResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

from ontoquery.ontology import EntitySchema


@dataclass(frozen=True)
class FieldInfo:
    """A resolved, queryable reference to one column."""

    entity_name: str
    field_name: str
    full_path: str
    table_alias: str
    column_name: str
    column_alias: str

    @property
    def qualified_column(self) -> str:
        return f"{self.table_alias}.{self.column_name}"


@dataclass(frozen=True)
class QueryResult:
    """Compiled SQL, its bound parameters, and the projected fields."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    selected_fields: tuple[FieldInfo, ...] = ()

    @property
    def column_aliases(self) -> list[str]:
        return [f.column_alias for f in self.selected_fields]


class _Savepoint(NamedTuple):
    alias_counter: int
    param_counter: int
    join_keys: tuple[str, ...]
    alias_keys: tuple[str, ...]
    param_names: tuple[str, ...]


@dataclass
class QueryContext:
    """Mutable accumulator threaded through one compilation.

    The context is created for a single query and discarded once the
    QueryResult is produced; it is never shared between compilations.
    The empty join-path key always maps to the root alias.
    """

    root_schema: EntitySchema
    alias_prefix: str = "t"
    param_prefix: str = "param"
    root_alias: str = field(init=False)
    select_fields: list[FieldInfo] = field(default_factory=list)
    where_clauses: list[str] = field(default_factory=list)
    join_clauses: dict[str, str] = field(default_factory=dict)
    resolved_path_aliases: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    _alias_counter: int = field(default=0, init=False, repr=False)
    _param_counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.root_alias = self.next_table_alias()
        self.resolved_path_aliases[""] = self.root_alias

    def next_table_alias(self) -> str:
        alias = f"{self.alias_prefix}{self._alias_counter}"
        self._alias_counter += 1
        return alias

    def next_param_name(self, column_alias: str) -> str:
        name = f"{self.param_prefix}_{column_alias}_{self._param_counter}"
        self._param_counter += 1
        return name

    def alias_for(self, path_key: str) -> str | None:
        return self.resolved_path_aliases.get(path_key)

    def register_join(self, path_key: str, alias: str, clause: str) -> None:
        if path_key in self.resolved_path_aliases:
            raise ValueError(f"Join path '{path_key}' is already registered")
        self.join_clauses[path_key] = clause
        self.resolved_path_aliases[path_key] = alias

    @property
    def has_joins(self) -> bool:
        return bool(self.join_clauses)

    def add_select_field(self, info: FieldInfo) -> bool:
        """Add a field to the projection; the first occurrence of a path wins."""
        if any(f.full_path == info.full_path for f in self.select_fields):
            return False
        self.select_fields.append(info)
        return True

    def add_where(self, clause: str) -> None:
        if clause:
            self.where_clauses.append(clause)

    def bind(self, name: str, value: Any) -> None:
        self.params[name] = value

    def savepoint(self) -> _Savepoint:
        return _Savepoint(
            self._alias_counter,
            self._param_counter,
            tuple(self.join_clauses),
            tuple(self.resolved_path_aliases),
            tuple(self.params),
        )

    def restore(self, sp: _Savepoint) -> None:
        """Drop joins, aliases and parameters registered after the savepoint."""
        self._alias_counter = sp.alias_counter
        self._param_counter = sp.param_counter
        for key in [k for k in self.join_clauses if k not in sp.join_keys]:
            del self.join_clauses[key]
        for key in [k for k in self.resolved_path_aliases if k not in sp.alias_keys]:
            del self.resolved_path_aliases[key]
        for key in [k for k in self.params if k not in sp.param_names]:
            del self.params[key]
