"""ontoquery: ontology-driven compilation of entity requests into parameterized SQL."""

__version__ = "0.1.0"

from ontoquery.builder import QueryBuilder
from ontoquery.config import QueryEngineConfig
from ontoquery.context import FieldInfo, QueryContext, QueryResult
from ontoquery.errors import (
    EmptyProjectionError,
    EntityNotFoundError,
    FieldPathUnresolvableError,
    ForeignTableFieldRejectedError,
    InvalidConditionError,
    InvalidFilterTreeError,
    InvalidPageRequestError,
    InvalidSortError,
    InvalidValueForTypeError,
    NoPrimaryKeyDefinedError,
    NoUpdatableFieldsSuppliedError,
    OntologyLoadError,
    OntoQueryError,
    PrimaryKeyImmutableError,
    QueryBuildError,
    RelationNotFoundError,
    UnknownFieldError,
    UnsupportedOperatorError,
)
from ontoquery.filters import Condition, FilterGroup, all_of, any_of, field_ref
from ontoquery.ontology import (
    EntitySchema,
    FieldSchema,
    OntologyAccessor,
    RelationSchema,
    StaticOntology,
    load_ontology,
)
from ontoquery.service import EntityService, Page
from ontoquery.values import convert_value

__all__ = [
    "__version__",
    "QueryBuilder",
    "QueryEngineConfig",
    "QueryContext",
    "QueryResult",
    "FieldInfo",
    "EntityService",
    "Page",
    "Condition",
    "FilterGroup",
    "field_ref",
    "all_of",
    "any_of",
    "EntitySchema",
    "FieldSchema",
    "RelationSchema",
    "OntologyAccessor",
    "StaticOntology",
    "load_ontology",
    "convert_value",
    "OntoQueryError",
    "OntologyLoadError",
    "QueryBuildError",
    "EntityNotFoundError",
    "RelationNotFoundError",
    "FieldPathUnresolvableError",
    "UnknownFieldError",
    "UnsupportedOperatorError",
    "InvalidValueForTypeError",
    "InvalidConditionError",
    "InvalidFilterTreeError",
    "NoPrimaryKeyDefinedError",
    "ForeignTableFieldRejectedError",
    "NoUpdatableFieldsSuppliedError",
    "PrimaryKeyImmutableError",
    "EmptyProjectionError",
    "InvalidSortError",
    "InvalidPageRequestError",
]
