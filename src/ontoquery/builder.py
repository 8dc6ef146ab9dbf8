"""QueryBuilder: entry point that compiles entity requests into SQL."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from ontoquery.assembler import (
    render_count,
    render_delete,
    render_find_single_id,
    render_insert,
    render_list,
    render_single,
    render_update,
)
from ontoquery.conditions import ConditionCompiler, compile_equality
from ontoquery.config import QueryEngineConfig
from ontoquery.context import QueryContext, QueryResult
from ontoquery.errors import (
    FieldPathUnresolvableError,
    ForeignTableFieldRejectedError,
    InvalidFilterTreeError,
    InvalidPageRequestError,
    InvalidSortError,
    NoUpdatableFieldsSuppliedError,
    PrimaryKeyImmutableError,
    QueryBuildError,
    UnknownFieldError,
)
from ontoquery.filters import Condition, FilterGroup
from ontoquery.ontology import EntitySchema, FieldKind, FieldSchema, OntologyAccessor
from ontoquery.resolver import PathResolver
from ontoquery.values import convert_value

logger = logging.getLogger(__name__)

QueryInput = Optional[Union[FilterGroup, Condition, Mapping[str, Any]]]


def as_filter_group(query: QueryInput) -> FilterGroup | None:
    """Normalize a filter tree given as a model, a single Condition, or raw JSON data."""
    if query is None or isinstance(query, FilterGroup):
        return query
    if isinstance(query, Condition):
        return FilterGroup(conditions=[query])
    try:
        return FilterGroup.model_validate(dict(query))
    except (TypeError, ValueError) as e:
        raise InvalidFilterTreeError(str(e)) from e


class QueryBuilder:
    """Compiles list/count/single/find-id/insert/update/delete queries.

    Each ``build_*`` call fetches the root schema from the ontology, creates a
    fresh QueryContext, and returns a QueryResult; nothing is shared between
    calls, so one builder may serve concurrent callers.
    """

    def __init__(
        self, ontology: OntologyAccessor, config: QueryEngineConfig | None = None
    ) -> None:
        self._ontology = ontology
        self._config = config or QueryEngineConfig()
        self._resolver = PathResolver(ontology, self._config)
        self._conditions = ConditionCompiler(self._resolver)

    @property
    def ontology(self) -> OntologyAccessor:
        return self._ontology

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def config(self) -> QueryEngineConfig:
        return self._config

    def new_context(self, entity_name: str) -> QueryContext:
        return QueryContext(
            self._ontology.get_entity_schema(entity_name),
            alias_prefix=self._config.table_alias_prefix,
            param_prefix=self._config.param_prefix,
        )

    # --- Reads ---

    def build_list(
        self,
        entity_name: str,
        fields: Sequence[str] | None = None,
        query: QueryInput = None,
        page: int = 1,
        page_size: int | None = None,
        sort_by: str | None = None,
        sort_dir: str | None = "ASC",
    ) -> QueryResult:
        """Paginated SELECT of the requested fields.

        Args:
            entity_name: Root entity.
            fields: Field paths to project; empty selects every bound root field.
            query: Filter tree.
            page: 1-based page number.
            page_size: Rows per page (defaults to config.default_page_size).
            sort_by: Field path or root field name to order by.
            sort_dir: ASC or DESC.
        """
        size = self._check_page(page, page_size)
        direction = _sort_direction(sort_dir)

        ctx = self.new_context(entity_name)
        self._select(ctx, fields)
        self._where(ctx, query)
        order_by = [self._order_term(ctx, sort_by, direction)] if sort_by else []

        sql = render_list(ctx, order_by, size, (page - 1) * size)
        logger.debug("Compiled list query for '%s': %s", entity_name, sql)
        return _result(sql, ctx, with_fields=True)

    def build_count(self, entity_name: str, query: QueryInput = None) -> QueryResult:
        ctx = self.new_context(entity_name)
        self._where(ctx, query)
        pk_column = _pk_column(ctx.root_schema) if ctx.has_joins else None
        sql = render_count(ctx, pk_column)
        logger.debug("Compiled count query for '%s': %s", entity_name, sql)
        return _result(sql, ctx)

    def build_single(
        self,
        entity_name: str,
        fields: Sequence[str] | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> QueryResult:
        """SELECT ... LIMIT 1 with AND-ed equality filters (typically on the id)."""
        ctx = self.new_context(entity_name)
        self._select(ctx, fields)
        for path, value in (filters or {}).items():
            info = self._resolver.resolve(path, ctx)
            field_schema = self._resolver.locate_field(path, ctx.root_schema)
            ctx.add_where(compile_equality(info, value, field_schema.type, ctx))

        sql = render_single(ctx)
        logger.debug("Compiled single query for '%s': %s", entity_name, sql)
        return _result(sql, ctx, with_fields=True)

    def build_find_single_id(self, entity_name: str, query: QueryInput = None) -> QueryResult:
        ctx = self.new_context(entity_name)
        self._where(ctx, query)
        sql = render_find_single_id(ctx, _pk_column(ctx.root_schema))
        logger.debug("Compiled find-single-id query for '%s': %s", entity_name, sql)
        return _result(sql, ctx)

    # --- Writes ---

    def build_insert(self, entity_name: str, values: Mapping[str, Any]) -> QueryResult:
        schema = self._ontology.get_entity_schema(entity_name)
        if not values:
            raise NoUpdatableFieldsSuppliedError(schema.name, "insert")

        columns: list[str] = []
        param_names: list[str] = []
        params: dict[str, Any] = {}
        for name, value in values.items():
            f = _writable_field(schema, name, "insert")
            assert f.db is not None
            param = f"insert_{name}"
            columns.append(f.db.column)
            param_names.append(param)
            params[param] = convert_value(value, f.type)

        sql = render_insert(schema.primary_table, columns, param_names)
        logger.debug("Compiled insert for '%s': %s", entity_name, sql)
        return QueryResult(sql, params)

    def build_update(
        self,
        entity_name: str,
        values: Mapping[str, Any],
        id_field_name: str | None = None,
    ) -> QueryResult:
        """UPDATE by id; the caller binds ``:id_param``."""
        schema = self._ontology.get_entity_schema(entity_name)
        if not values:
            raise NoUpdatableFieldsSuppliedError(schema.name, "update")

        assignments: list[tuple[str, str]] = []
        params: dict[str, Any] = {}
        for name, value in values.items():
            f = _writable_field(schema, name, "update")
            assert f.db is not None
            param = f"set_{name}"
            assignments.append((f.db.column, param))
            params[param] = convert_value(value, f.type)

        id_field = _id_field(schema, id_field_name)
        assert id_field.db is not None
        sql = render_update(schema.primary_table, assignments, id_field.db.column)
        logger.debug("Compiled update for '%s': %s", entity_name, sql)
        return QueryResult(sql, params)

    def build_delete(self, entity_name: str, id_field_name: str | None = None) -> QueryResult:
        """DELETE by id; the caller binds ``:id_param``."""
        schema = self._ontology.get_entity_schema(entity_name)
        id_field = _id_field(schema, id_field_name)
        assert id_field.db is not None
        sql = render_delete(schema.primary_table, id_field.db.column)
        return QueryResult(sql, {})

    # --- Helpers ---

    def _select(self, ctx: QueryContext, fields: Sequence[str] | None) -> None:
        paths = list(fields) if fields else _default_fields(ctx.root_schema)
        for path in paths:
            ctx.add_select_field(self._resolver.resolve(path, ctx))

    def _where(self, ctx: QueryContext, query: QueryInput) -> None:
        group = as_filter_group(query)
        if group is not None:
            ctx.add_where(self._conditions.compile(group, ctx))

    def _order_term(self, ctx: QueryContext, sort_by: str, direction: str) -> str:
        sp = ctx.savepoint()
        try:
            info = self._resolver.resolve(sort_by, ctx)
        except QueryBuildError as e:
            ctx.restore(sp)
            root_field = ctx.root_schema.find_field(sort_by)
            if root_field is not None and root_field.db is not None:
                return f"{ctx.root_alias}.{root_field.db.column} {direction}"
            raise InvalidSortError(
                sort_by,
                f"{e}; entity '{ctx.root_schema.display_name}' has no field '{sort_by}' either",
            ) from e
        return f"{info.qualified_column} {direction}"

    def _check_page(self, page: int, page_size: int | None) -> int:
        size = self._config.default_page_size if page_size is None else page_size
        if page < 1:
            raise InvalidPageRequestError(f"Page must be >= 1, got {page}")
        if not 1 <= size <= self._config.max_page_size:
            raise InvalidPageRequestError(
                f"Page size must be between 1 and {self._config.max_page_size}, got {size}"
            )
        return size


def _result(sql: str, ctx: QueryContext, *, with_fields: bool = False) -> QueryResult:
    fields = tuple(ctx.select_fields) if with_fields else ()
    return QueryResult(sql, dict(ctx.params), fields)


def _default_fields(schema: EntitySchema) -> list[str]:
    return [f.name for f in schema.fields if f.kind is not FieldKind.UNBOUND]


def _pk_column(schema: EntitySchema) -> str:
    pk = schema.primary_key_field()
    assert pk.db is not None
    return pk.db.column


def _sort_direction(sort_dir: str | None) -> str:
    direction = (sort_dir or "ASC").strip().upper()
    if direction not in ("ASC", "DESC"):
        raise InvalidPageRequestError(f"Sort direction must be ASC or DESC, got '{sort_dir}'")
    return direction


def _writable_field(schema: EntitySchema, name: str, operation: str) -> FieldSchema:
    f = schema.find_field(name)
    if f is None:
        logger.warning("Rejected %s of unknown field '%s' on '%s'", operation, name, schema.name)
        raise UnknownFieldError(schema.name, name)
    if operation == "update" and f.is_primary_key:
        logger.warning("Rejected update of primary key '%s' on '%s'", name, schema.name)
        raise PrimaryKeyImmutableError(schema.name, name)
    if f.db is None:
        raise FieldPathUnresolvableError(
            name, f"field '{name}' of entity '{schema.name}' has no database binding"
        )
    if f.db.table != schema.primary_table:
        logger.warning(
            "Rejected %s of field '%s' from table '%s' on '%s'",
            operation,
            name,
            f.db.table,
            schema.name,
        )
        raise ForeignTableFieldRejectedError(schema.name, name, f.db.table)
    return f


def _id_field(schema: EntitySchema, id_field_name: str | None) -> FieldSchema:
    if id_field_name is None:
        return schema.primary_key_field()
    f = schema.find_field(id_field_name)
    if f is None or f.db is None:
        raise UnknownFieldError(schema.name, id_field_name)
    return f
