"""Ontology schema models and the accessor the compiler reads them through.

The ontology document is the JSON (or YAML) description of business entities:

    {"entities": {"supplier": {"meta": {...}, "fields": [...], "relations": {...}}}}

Keys keep the camelCase spelling of the stored documents (``primaryTable``,
``isPrimaryKey``, ``relationName``, ...). All models are frozen: a schema
snapshot is shared read-only between concurrent compilations.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ontoquery.errors import EntityNotFoundError, NoPrimaryKeyDefinedError, OntologyLoadError


class FieldKind(Enum):
    """How a field maps onto the database."""

    PLAIN = "plain"
    RELATION_PROXY = "relation_proxy"
    UNBOUND = "unbound"


class _SchemaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class DbBinding(_SchemaModel):
    """Database location of a field."""

    table: str | None = None
    column: str
    is_primary_key: bool = Field(default=False, alias="isPrimaryKey")
    relation_name: str | None = Field(default=None, alias="relationName")

    @field_validator("is_primary_key", mode="before")
    @classmethod
    def _null_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("relation_name", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class FieldSchema(_SchemaModel):
    """One column-level attribute of an entity."""

    name: str
    type: str = "string"
    description: str | None = None
    user_friendly_name: str | None = Field(default=None, alias="userFriendlyName")
    db: DbBinding | None = None

    @property
    def kind(self) -> FieldKind:
        if self.db is None:
            return FieldKind.UNBOUND
        if self.db.relation_name:
            return FieldKind.RELATION_PROXY
        return FieldKind.PLAIN

    @property
    def is_primary_key(self) -> bool:
        return self.db is not None and self.db.is_primary_key


class RelationSchema(_SchemaModel):
    """Edge from the owning entity to a target entity."""

    type: str | None = None
    target_entity: str = Field(alias="targetEntity")
    source_table: str | None = Field(default=None, alias="sourceTable")
    source_column: str = Field(alias="sourceColumn")
    target_table: str = Field(alias="targetTable")
    target_column: str = Field(alias="targetColumn")
    join_condition: str | None = Field(default=None, alias="joinCondition")


class EntityMeta(_SchemaModel):
    """Entity-level metadata."""

    primary_table: str = Field(alias="primaryTable")
    user_friendly_name: str | None = Field(default=None, alias="userFriendlyName")
    entity_name_plural: str | None = Field(default=None, alias="entityNamePlural")
    description: str | None = None
    default_search_field: str | None = Field(default=None, alias="defaultSearchField")


class EntitySchema(_SchemaModel):
    """A logical entity: its table, fields, and outgoing relations."""

    name: str = ""
    meta: EntityMeta
    fields: tuple[FieldSchema, ...] = ()
    relations: dict[str, RelationSchema] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _unique_field_names(self) -> EntitySchema:
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"duplicate field name '{f.name}' in entity '{self.name}'")
            seen.add(f.name)
        return self

    @property
    def primary_table(self) -> str:
        return self.meta.primary_table

    @property
    def display_name(self) -> str:
        return self.meta.user_friendly_name or self.name

    @property
    def plural_name(self) -> str:
        return self.meta.entity_name_plural or self.name

    def find_field(self, name: str) -> FieldSchema | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def find_field_by_column(self, column: str) -> FieldSchema | None:
        for f in self.fields:
            if f.db is not None and f.db.column == column:
                return f
        return None

    def find_relation(self, name: str) -> RelationSchema | None:
        return self.relations.get(name)

    def primary_key_field(self) -> FieldSchema:
        """Return the single primary-key field, or raise NoPrimaryKeyDefinedError."""
        keys = [f for f in self.fields if f.is_primary_key]
        if len(keys) != 1:
            raise NoPrimaryKeyDefinedError(self.name, len(keys))
        return keys[0]


class OntologyDocument(_SchemaModel):
    """A full ontology: entity name -> schema."""

    entities: dict[str, EntitySchema] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _inject_entity_names(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("entities"), dict):
            return data
        entities: dict[str, Any] = {}
        for name, raw in data["entities"].items():
            if isinstance(raw, dict) and not raw.get("name"):
                raw = {**raw, "name": name}
            entities[name] = raw
        return {**data, "entities": entities}


@runtime_checkable
class OntologyAccessor(Protocol):
    """Source of entity schemas consumed by the compiler."""

    def get_entity_schema(self, name: str) -> EntitySchema: ...


class StaticOntology:
    """In-memory accessor over a parsed ontology document."""

    def __init__(self, document: OntologyDocument) -> None:
        self._document = document

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StaticOntology:
        return cls(OntologyDocument.model_validate(data))

    @property
    def document(self) -> OntologyDocument:
        return self._document

    def entity_names(self) -> list[str]:
        return sorted(self._document.entities)

    def get_entity_schema(self, name: str) -> EntitySchema:
        schema = self._document.entities.get(name)
        if schema is None:
            raise EntityNotFoundError(name)
        return schema


def load_ontology(path: str | Path) -> StaticOntology:
    """Load an ontology document from a JSON or YAML file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise OntologyLoadError(str(path), str(e)) from e

    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise OntologyLoadError(str(path), f"malformed document: {e}") from e

    if not isinstance(data, dict):
        raise OntologyLoadError(str(path), "top-level document must be a mapping")

    try:
        return StaticOntology(OntologyDocument.model_validate(data))
    except ValidationError as e:
        raise OntologyLoadError(str(path), str(e)) from e
