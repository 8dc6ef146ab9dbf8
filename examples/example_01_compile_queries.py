"""Example 01: Compiling entity requests to SQL.

This example demonstrates:
- Describing entities, fields and relations in an ontology document
- Selecting fields across relations (each relation path becomes one LEFT JOIN)
- Relation-proxy fields that read a column of a related table
- Filter trees built with the field_ref DSL or passed as JSON
- Count, single-row, insert, update and delete statements
"""

from ontoquery import QueryBuilder, StaticOntology, field_ref

ONTOLOGY = {
    "entities": {
        "supplier": {
            "meta": {"primaryTable": "suppliers", "entityNamePlural": "suppliers"},
            "fields": [
                {"name": "id", "type": "uuid", "db": {"table": "suppliers", "column": "id", "isPrimaryKey": True}},
                {"name": "name", "type": "string", "db": {"table": "suppliers", "column": "name"}},
                {"name": "inn", "type": "string", "db": {"table": "suppliers", "column": "inn"}},
                {"name": "rating", "type": "integer", "db": {"table": "suppliers", "column": "rating"}},
                {"name": "regionId", "type": "uuid", "db": {"table": "suppliers", "column": "region_id"}},
                {
                    "name": "regionName",
                    "type": "string",
                    "db": {"table": "regions", "column": "name", "relationName": "region"},
                },
            ],
            "relations": {
                "region": {
                    "targetEntity": "region",
                    "sourceColumn": "region_id",
                    "targetTable": "regions",
                    "targetColumn": "id",
                },
                "contacts": {
                    "targetEntity": "contact",
                    "sourceColumn": "id",
                    "targetTable": "contacts",
                    "targetColumn": "supplier_id",
                    "joinCondition": "targetAlias.is_deleted = false",
                },
            },
        },
        "region": {
            "meta": {"primaryTable": "regions"},
            "fields": [
                {"name": "id", "type": "uuid", "db": {"table": "regions", "column": "id", "isPrimaryKey": True}},
                {"name": "name", "type": "string", "db": {"table": "regions", "column": "name"}},
            ],
        },
        "contact": {
            "meta": {"primaryTable": "contacts"},
            "fields": [
                {"name": "id", "type": "uuid", "db": {"table": "contacts", "column": "id", "isPrimaryKey": True}},
                {"name": "email", "type": "string", "db": {"table": "contacts", "column": "email"}},
            ],
        },
    }
}


def show(title, result):
    print(f"--- {title} ---")
    print(result.sql)
    for name, value in result.params.items():
        print(f"  :{name} = {value!r}")
    print()


def main():
    """Run the query compilation example."""
    builder = QueryBuilder(StaticOntology.from_dict(ONTOLOGY))

    # Step 1: A paginated list across a relation, filtered and sorted
    query = (field_ref("rating") > 3) & (
        field_ref("inn").contains("77") | (field_ref("contacts.email") == "sales@acme.test")
    )
    show(
        "list",
        builder.build_list(
            "supplier", ["name", "regionName"], query, page=2, page_size=10, sort_by="name"
        ),
    )

    # Step 2: The same filter as a JSON tree, counted
    json_query = {
        "operator": "OR",
        "conditions": [{"field": "region.name", "operator": "equals", "value": "North"}],
    }
    show("count", builder.build_count("supplier", json_query))

    # Step 3: Single-row lookup and the id of the only matching row
    show("single", builder.build_single("supplier", ["name"], {"inn": "7701"}))
    show("find single id", builder.build_find_single_id("supplier", field_ref("inn") == "7701"))

    # Step 4: Mutations (the caller binds :id_param for update/delete)
    show("insert", builder.build_insert("supplier", {"name": "Acme", "rating": "5"}))
    show("update", builder.build_update("supplier", {"rating": "4"}))
    show("delete", builder.build_delete("supplier"))


if __name__ == "__main__":
    main()
