"""Structured error types for ontoquery."""

from __future__ import annotations


class OntoQueryError(Exception):
    """Base error for all ontoquery errors."""


class OntologyLoadError(OntoQueryError):
    """Raised when an ontology document cannot be read or validated."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Failed to load ontology from '{source}': {detail}")


class QueryBuildError(OntoQueryError):
    """Base error for client-input problems detected while compiling a query."""


class EntityNotFoundError(QueryBuildError):
    """Raised when the ontology has no schema for an entity name."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Schema for entity '{entity_name}' not found.")


class RelationNotFoundError(QueryBuildError):
    """Raised when a relation-proxy field points at a relation the entity does not declare."""

    def __init__(self, entity_name: str, relation_name: str, field_name: str) -> None:
        self.entity_name = entity_name
        self.relation_name = relation_name
        self.field_name = field_name
        super().__init__(
            f"Field '{field_name}' of entity '{entity_name}' references "
            f"unknown relation '{relation_name}'."
        )


class FieldPathUnresolvableError(QueryBuildError):
    """Raised when a dotted field path cannot be resolved to a column."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Path '{path}' cannot be resolved: {detail}")


class UnknownFieldError(FieldPathUnresolvableError):
    """Raised when a mutation payload names a field the entity does not have."""

    def __init__(self, entity_name: str, field_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(field_name, f"entity '{entity_name}' has no field '{field_name}'")


class UnsupportedOperatorError(QueryBuildError):
    """Raised for a condition operator the compiler does not know."""

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Unsupported operator: '{operator}'")


class InvalidValueForTypeError(QueryBuildError):
    """Raised when a raw value cannot be converted to a field's logical type."""

    def __init__(self, value: str, logical_type: str) -> None:
        self.value = value
        self.logical_type = logical_type
        super().__init__(f"Invalid value '{value}' for field type '{logical_type}'")


class InvalidFilterTreeError(QueryBuildError):
    """Raised when a filter tree does not have the condition/group shape."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid filter tree: {detail}")


class InvalidConditionError(QueryBuildError):
    """Raised when one condition of a filter tree fails to compile."""

    def __init__(self, field: str, cause: QueryBuildError) -> None:
        self.field = field
        self.cause = cause
        super().__init__(f"Error processing condition for field '{field}': {cause}")


class NoPrimaryKeyDefinedError(QueryBuildError):
    """Raised when an entity does not declare exactly one primary-key field."""

    def __init__(self, entity_name: str, count: int = 0) -> None:
        self.entity_name = entity_name
        self.count = count
        if count == 0:
            detail = "no primary key is defined"
        else:
            detail = f"{count} primary-key fields are defined; exactly one is required"
        super().__init__(f"Entity '{entity_name}': {detail}.")


class ForeignTableFieldRejectedError(QueryBuildError):
    """Raised when an insert/update touches a column outside the entity's primary table."""

    def __init__(self, entity_name: str, field_name: str, table: str | None) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        self.table = table
        super().__init__(
            f"Field '{field_name}' belongs to table '{table}' and cannot be written "
            f"through entity '{entity_name}'."
        )


class NoUpdatableFieldsSuppliedError(QueryBuildError):
    """Raised when an insert/update payload is empty."""

    def __init__(self, entity_name: str, operation: str) -> None:
        self.entity_name = entity_name
        self.operation = operation
        super().__init__(f"No fields supplied for {operation} of entity '{entity_name}'.")


class PrimaryKeyImmutableError(QueryBuildError):
    """Raised when an update tries to change the primary key."""

    def __init__(self, entity_name: str, field_name: str) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        super().__init__(
            f"Primary key '{field_name}' of entity '{entity_name}' cannot be updated."
        )


class EmptyProjectionError(QueryBuildError):
    """Raised when a SELECT would have no columns."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"No fields selected for entity '{entity_name}'.")


class InvalidSortError(QueryBuildError):
    """Raised when a sort key matches neither a field path nor a root field."""

    def __init__(self, sort_by: str, detail: str) -> None:
        self.sort_by = sort_by
        self.detail = detail
        super().__init__(f"Cannot sort by '{sort_by}': {detail}")


class InvalidPageRequestError(QueryBuildError):
    """Raised for out-of-range pagination or an unknown sort direction."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
