"""Shared test fixtures for ontoquery tests."""

from __future__ import annotations

import copy
import sqlite3

import pytest

from ontoquery import EntityService, QueryBuilder, StaticOntology

# --- Sample ontology ---

SUPPLIER = {
    "meta": {
        "primaryTable": "suppliers",
        "userFriendlyName": "Supplier",
        "entityNamePlural": "suppliers",
        "defaultSearchField": "name",
    },
    "fields": [
        {"name": "id", "type": "uuid", "db": {"table": "suppliers", "column": "id", "isPrimaryKey": True}},
        {"name": "name", "type": "string", "db": {"table": "suppliers", "column": "name"}},
        {"name": "inn", "type": "string", "db": {"table": "suppliers", "column": "inn"}},
        {"name": "rating", "type": "integer", "db": {"table": "suppliers", "column": "rating"}},
        {"name": "turnover", "type": "decimal", "db": {"table": "suppliers", "column": "turnover"}},
        {"name": "isActive", "type": "boolean", "db": {"table": "suppliers", "column": "is_active"}},
        {
            "name": "registeredOn",
            "type": "date",
            "db": {"table": "suppliers", "column": "registered_on"},
        },
        {"name": "externalRef", "type": "long", "db": {"table": "suppliers", "column": "external_ref"}},
        {"name": "regionId", "type": "uuid", "db": {"table": "suppliers", "column": "region_id"}},
        {
            "name": "regionName",
            "type": "string",
            "db": {"table": "regions", "column": "name", "relationName": "region"},
        },
        {"name": "notes", "type": "string", "description": "Computed, not stored"},
    ],
    "relations": {
        "region": {
            "type": "many-to-one",
            "targetEntity": "region",
            "sourceTable": "suppliers",
            "sourceColumn": "region_id",
            "targetTable": "regions",
            "targetColumn": "id",
        },
        "contacts": {
            "type": "one-to-many",
            "targetEntity": "contact",
            "sourceColumn": "id",
            "targetTable": "contacts",
            "targetColumn": "supplier_id",
            "joinCondition": "targetAlias.is_deleted = false",
        },
        "orders": {
            "type": "one-to-many",
            "targetEntity": "supplierOrder",
            "sourceColumn": "id",
            "targetTable": "supplier_orders",
            "targetColumn": "supplier_id",
        },
    },
}

REGION = {
    "meta": {"primaryTable": "regions", "entityNamePlural": "regions"},
    "fields": [
        {"name": "id", "type": "uuid", "db": {"table": "regions", "column": "id", "isPrimaryKey": True}},
        {"name": "name", "type": "string", "db": {"table": "regions", "column": "name"}},
        {"name": "code", "type": "string", "db": {"table": "regions", "column": "code"}},
    ],
}

CONTACT = {
    "meta": {"primaryTable": "contacts", "entityNamePlural": "contacts"},
    "fields": [
        {"name": "id", "type": "uuid", "db": {"table": "contacts", "column": "id", "isPrimaryKey": True}},
        {"name": "email", "type": "string", "db": {"table": "contacts", "column": "email"}},
        {"name": "supplierId", "type": "uuid", "db": {"table": "contacts", "column": "supplier_id"}},
    ],
}

SUPPLIER_ORDER = {
    "meta": {"primaryTable": "supplier_orders", "entityNamePlural": "supplierOrders"},
    "fields": [
        {
            "name": "id",
            "type": "uuid",
            "db": {"table": "supplier_orders", "column": "id", "isPrimaryKey": True},
        },
        {"name": "status", "type": "string", "db": {"table": "supplier_orders", "column": "status"}},
        {"name": "amount", "type": "decimal", "db": {"table": "supplier_orders", "column": "amount"}},
    ],
    "relations": {
        "supplier": {
            "targetEntity": "supplier",
            "sourceColumn": "supplier_id",
            "targetTable": "suppliers",
            "targetColumn": "id",
        },
        "items": {
            "targetEntity": "orderItem",
            "sourceColumn": "id",
            "targetTable": "order_items",
            "targetColumn": "order_id",
        },
    },
}

ORDER_ITEM = {
    "meta": {"primaryTable": "order_items", "entityNamePlural": "orderItems"},
    "fields": [
        {"name": "id", "type": "uuid", "db": {"table": "order_items", "column": "id", "isPrimaryKey": True}},
        {"name": "sku", "type": "string", "db": {"table": "order_items", "column": "sku"}},
        {"name": "quantity", "type": "integer", "db": {"table": "order_items", "column": "quantity"}},
    ],
}

AUDIT_LOG = {
    "meta": {"primaryTable": "audit_log"},
    "fields": [
        {"name": "message", "type": "string", "db": {"table": "audit_log", "column": "message"}},
        {"name": "supplierId", "type": "uuid", "db": {"table": "audit_log", "column": "supplier_id"}},
    ],
    "relations": {
        "supplier": {
            "targetEntity": "supplier",
            "sourceColumn": "supplier_id",
            "targetTable": "suppliers",
            "targetColumn": "id",
        },
    },
}

TAG = {
    "meta": {"primaryTable": "tags"},
    "fields": [
        {"name": "id", "type": "long", "db": {"table": "tags", "column": "id", "isPrimaryKey": True}},
        {"name": "label", "type": "string", "db": {"table": "tags", "column": "label"}},
    ],
}

WAREHOUSE = {
    "meta": {"primaryTable": "warehouses"},
    "fields": [
        {"name": "id", "type": "uuid", "db": {"table": "warehouses", "column": "id", "isPrimaryKey": True}},
        {
            "name": "cityName",
            "type": "string",
            "db": {"table": "cities", "column": "name", "relationName": "city"},
        },
    ],
}

ONTOLOGY = {
    "entities": {
        "supplier": SUPPLIER,
        "region": REGION,
        "contact": CONTACT,
        "supplierOrder": SUPPLIER_ORDER,
        "orderItem": ORDER_ITEM,
        "auditLog": AUDIT_LOG,
        "warehouse": WAREHOUSE,
        "tag": TAG,
    }
}

SQLITE_DDL = """
CREATE TABLE regions (
    id   TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    code TEXT
);

CREATE TABLE suppliers (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    inn           TEXT,
    rating        INTEGER,
    turnover      NUMERIC,
    is_active     INTEGER,
    registered_on TEXT,
    external_ref  INTEGER,
    region_id     TEXT REFERENCES regions(id)
);

CREATE TABLE contacts (
    id          TEXT PRIMARY KEY,
    email       TEXT,
    supplier_id TEXT,
    is_deleted  INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE tags (
    id    INTEGER PRIMARY KEY,
    label TEXT
);
"""


# --- Fixtures ---


@pytest.fixture
def ontology_data():
    """A fresh, mutable copy of the sample ontology document."""
    return copy.deepcopy(ONTOLOGY)


@pytest.fixture
def ontology(ontology_data):
    return StaticOntology.from_dict(ontology_data)


@pytest.fixture
def builder(ontology):
    return QueryBuilder(ontology)


@pytest.fixture
def conn():
    """In-memory SQLite database with the supplier/region/contact tables."""
    c = sqlite3.connect(":memory:")
    c.executescript(SQLITE_DDL)
    yield c
    c.close()


@pytest.fixture
def service(conn, builder):
    return EntityService(conn, builder)
