"""Resolution of dotted field paths into aliased columns and LEFT JOINs."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ontoquery.config import QueryEngineConfig
from ontoquery.context import FieldInfo, QueryContext
from ontoquery.errors import FieldPathUnresolvableError, RelationNotFoundError
from ontoquery.ontology import (
    EntitySchema,
    FieldKind,
    FieldSchema,
    OntologyAccessor,
    RelationSchema,
)

logger = logging.getLogger(__name__)


class SegmentKind(Enum):
    FIELD = "field"
    PROXY_FIELD = "proxy_field"
    RELATION = "relation"


@dataclass(frozen=True)
class PathStep:
    """One classified path segment."""

    kind: SegmentKind
    name: str
    field: FieldSchema | None = None
    relation: RelationSchema | None = None


_Pending = Union[str, PathStep]


class PathResolver:
    """Walks field paths through the ontology.

    Segments are matched against fields first, then relations. A
    relation-proxy field is rewritten into its relation hop followed by the
    target field that shares the proxy's column; the rewrite pushes an
    already-classified relation step so the relation is never mistaken for a
    same-named field.
    """

    def __init__(
        self, ontology: OntologyAccessor, config: QueryEngineConfig | None = None
    ) -> None:
        self._ontology = ontology
        self._config = config or QueryEngineConfig()

    def resolve(self, full_path: str, ctx: QueryContext) -> FieldInfo:
        """Resolve a path against the context's root, registering joins in ``ctx``."""
        leaf, owner, alias = self._walk(full_path, ctx.root_schema, ctx)
        assert leaf.db is not None
        return FieldInfo(
            entity_name=owner.plural_name,
            field_name=leaf.name,
            full_path=full_path,
            table_alias=alias,
            column_name=leaf.db.column,
            column_alias=full_path.replace(".", "_"),
        )

    def locate_field(self, full_path: str, root_schema: EntitySchema) -> FieldSchema:
        """Return the FieldSchema a path ends on, without touching any context."""
        leaf, _, _ = self._walk(full_path, root_schema, None)
        return leaf

    def classify(self, schema: EntitySchema, segment: str, full_path: str) -> PathStep:
        f = schema.find_field(segment)
        if f is not None:
            kind = f.kind
            if kind is FieldKind.PLAIN:
                return PathStep(SegmentKind.FIELD, segment, field=f)
            if kind is FieldKind.RELATION_PROXY:
                return PathStep(SegmentKind.PROXY_FIELD, segment, field=f)
            raise FieldPathUnresolvableError(
                full_path,
                f"field '{segment}' of entity '{schema.display_name}' has no database binding",
            )

        relation = schema.find_relation(segment)
        if relation is None:
            raise FieldPathUnresolvableError(
                full_path,
                f"'{segment}' is neither a field nor a relation "
                f"of entity '{schema.display_name}'",
            )
        return PathStep(SegmentKind.RELATION, segment, relation=relation)

    def _walk(
        self,
        full_path: str,
        root: EntitySchema,
        ctx: QueryContext | None,
    ) -> tuple[FieldSchema, EntitySchema, str]:
        pending: deque[_Pending] = deque(_split_path(full_path))
        schema = root
        alias = ctx.root_alias if ctx is not None else ""
        path_key = ""
        hops = 0

        while pending:
            item = pending.popleft()
            step = item if isinstance(item, PathStep) else self.classify(schema, item, full_path)

            if step.kind is SegmentKind.FIELD:
                if pending:
                    raise FieldPathUnresolvableError(
                        full_path,
                        f"field '{step.name}' is not a relation and cannot have nested elements",
                    )
                assert step.field is not None
                return step.field, schema, alias

            if step.kind is SegmentKind.PROXY_FIELD:
                assert step.field is not None
                relation_step, target_field = self._expand_proxy(schema, step.field, full_path)
                pending.appendleft(target_field)
                pending.appendleft(relation_step)
                continue

            hops += 1
            if hops > self._config.max_path_depth:
                raise FieldPathUnresolvableError(
                    full_path,
                    f"path crosses more than {self._config.max_path_depth} relations",
                )
            assert step.relation is not None
            path_key = f"{path_key}.{step.name}" if path_key else step.name
            if ctx is not None:
                alias = self._join(ctx, path_key, alias, step.relation)
            schema = self._ontology.get_entity_schema(step.relation.target_entity)

        raise FieldPathUnresolvableError(
            full_path, "path points at an entity, not at a field"
        )

    def _expand_proxy(
        self, schema: EntitySchema, proxy: FieldSchema, full_path: str
    ) -> tuple[PathStep, str]:
        assert proxy.db is not None and proxy.db.relation_name
        relation_name = proxy.db.relation_name
        relation = schema.find_relation(relation_name)
        if relation is None:
            raise RelationNotFoundError(schema.name, relation_name, proxy.name)

        target = self._ontology.get_entity_schema(relation.target_entity)
        target_field = target.find_field_by_column(proxy.db.column)
        if target_field is None:
            raise FieldPathUnresolvableError(
                full_path,
                f"entity '{target.display_name}' has no field for column '{proxy.db.column}'",
            )
        return PathStep(SegmentKind.RELATION, relation_name, relation=relation), target_field.name

    def _join(
        self, ctx: QueryContext, path_key: str, current_alias: str, relation: RelationSchema
    ) -> str:
        existing = ctx.alias_for(path_key)
        if existing is not None:
            return existing

        new_alias = ctx.next_table_alias()
        clause = (
            f"LEFT JOIN {relation.target_table} {new_alias} "
            f"ON {current_alias}.{relation.source_column} = {new_alias}.{relation.target_column}"
        )
        if relation.join_condition and relation.join_condition.strip():
            condition = relation.join_condition.replace(
                self._config.join_alias_placeholder, new_alias
            )
            clause += f" AND {condition}"

        ctx.register_join(path_key, new_alias, clause)
        logger.debug("Registered join %s for path '%s'", new_alias, path_key)
        return new_alias


def _split_path(full_path: str) -> list[str]:
    segments = full_path.split(".") if full_path else []
    if not segments or any(not s for s in segments):
        raise FieldPathUnresolvableError(full_path, "path is empty or has an empty segment")
    return segments
