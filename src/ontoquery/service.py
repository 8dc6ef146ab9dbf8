"""Execution of compiled queries against a DB-API connection."""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ontoquery.assembler import ID_PARAM
from ontoquery.builder import QueryBuilder, QueryInput
from ontoquery.context import QueryResult
from ontoquery.errors import OntoQueryError
from ontoquery.ontology import EntitySchema
from ontoquery.values import convert_value, from_db_value, to_db_param

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of hydrated rows plus totals."""

    content: list[dict[str, Any]] = field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page: int = 1
    page_size: int = 0


class EntityService:
    """Runs QueryBuilder output on a connection that accepts ``:name`` parameters.

    Rows come back as dicts keyed by field path, with every value converted to
    its field's logical type. Mutations are committed immediately.
    """

    def __init__(self, connection: Any, builder: QueryBuilder) -> None:
        self._conn = connection
        self._builder = builder

    @property
    def builder(self) -> QueryBuilder:
        return self._builder

    def find_entities(
        self,
        entity_name: str,
        fields: Sequence[str] | None = None,
        query: QueryInput = None,
        page: int = 1,
        page_size: int | None = None,
        sort_by: str | None = None,
        sort_dir: str | None = "ASC",
    ) -> Page:
        size = self._builder.config.default_page_size if page_size is None else page_size
        list_result = self._builder.build_list(
            entity_name, fields, query, page=page, page_size=size, sort_by=sort_by, sort_dir=sort_dir
        )
        count_result = self._builder.build_count(entity_name, query)

        content = self._hydrate(entity_name, list_result, self._fetch(list_result))
        total = int(self._fetch(count_result)[0][0])
        return Page(
            content=content,
            total_elements=total,
            total_pages=math.ceil(total / size),
            page=page,
            page_size=size,
        )

    def find_entity_by_id(
        self, entity_name: str, entity_id: Any, fields: Sequence[str] | None = None
    ) -> dict[str, Any] | None:
        pk = self._schema(entity_name).primary_key_field()
        result = self._builder.build_single(entity_name, fields, {pk.name: entity_id})
        rows = self._hydrate(entity_name, result, self._fetch(result))
        return rows[0] if rows else None

    def find_single_entity_id(self, entity_name: str, query: QueryInput = None) -> Any | None:
        """Primary key of the only row matching ``query``; None when zero or several match."""
        pk = self._schema(entity_name).primary_key_field()
        rows = self._fetch(self._builder.build_find_single_id(entity_name, query))
        if len(rows) != 1:
            logger.debug("Expected one '%s' row, found %d", entity_name, len(rows))
            return None
        return from_db_value(rows[0][0], pk.type)

    def create_entity(self, entity_name: str, values: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a row and read it back.

        A UUID primary key is generated when the payload does not supply one;
        other key types left out of the payload are read from the cursor's
        ``lastrowid``.
        """
        pk = self._schema(entity_name).primary_key_field()
        payload = dict(values)
        if payload.get(pk.name) in (None, "") and pk.type.lower() == "uuid":
            payload[pk.name] = uuid.uuid4()

        result = self._builder.build_insert(entity_name, payload)
        last_row_id = self._insert(result)
        self._conn.commit()

        new_id = convert_value(payload.get(pk.name), pk.type)
        if new_id is None:
            new_id = from_db_value(last_row_id, pk.type)
        if new_id is None:
            raise OntoQueryError(f"Cannot determine the primary key of the new '{entity_name}' row")
        logger.info("Created '%s' %s", entity_name, new_id)
        return self.find_entity_by_id(entity_name, new_id)

    def update_entity(
        self, entity_name: str, entity_id: Any, values: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        pk = self._schema(entity_name).primary_key_field()
        result = self._builder.build_update(entity_name, values)
        rowcount = self._execute(result, {ID_PARAM: convert_value(entity_id, pk.type)})
        self._conn.commit()

        if rowcount == 0:
            logger.warning("Update of '%s' %s matched no rows", entity_name, entity_id)
            return None
        logger.info("Updated '%s' %s (%d fields)", entity_name, entity_id, len(values))
        return self.find_entity_by_id(entity_name, entity_id)

    def delete_entity(self, entity_name: str, entity_id: Any) -> bool:
        pk = self._schema(entity_name).primary_key_field()
        result = self._builder.build_delete(entity_name)
        rowcount = self._execute(result, {ID_PARAM: convert_value(entity_id, pk.type)})
        self._conn.commit()

        if rowcount == 0:
            logger.warning("Delete of '%s' %s matched no rows", entity_name, entity_id)
            return False
        logger.info("Deleted '%s' %s", entity_name, entity_id)
        return True

    # --- Helpers ---

    def _schema(self, entity_name: str) -> EntitySchema:
        return self._builder.ontology.get_entity_schema(entity_name)

    def _bind(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return {name: to_db_param(value) for name, value in params.items()}

    def _fetch(self, result: QueryResult) -> list[Sequence[Any]]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(result.sql, self._bind(result.params))
            return cursor.fetchall()
        finally:
            cursor.close()

    def _execute(self, result: QueryResult, extra: Mapping[str, Any] | None = None) -> int:
        params = {**result.params, **(extra or {})}
        cursor = self._conn.cursor()
        try:
            cursor.execute(result.sql, self._bind(params))
            return cursor.rowcount
        finally:
            cursor.close()

    def _insert(self, result: QueryResult) -> Any:
        cursor = self._conn.cursor()
        try:
            cursor.execute(result.sql, self._bind(result.params))
            return cursor.lastrowid
        finally:
            cursor.close()

    def _hydrate(
        self, entity_name: str, result: QueryResult, rows: list[Sequence[Any]]
    ) -> list[dict[str, Any]]:
        root = self._schema(entity_name)
        resolver = self._builder.resolver
        types = [resolver.locate_field(f.full_path, root).type for f in result.selected_fields]
        return [
            {
                info.full_path: from_db_value(value, logical_type)
                for info, logical_type, value in zip(result.selected_fields, types, row)
            }
            for row in rows
        ]
