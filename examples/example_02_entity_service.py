"""Example 02: Running compiled queries with EntityService.

This example demonstrates:
- Loading an ontology document from disk
- Creating, reading, updating and deleting rows on SQLite
- Paginated search with totals

Run it from the repository root:

    python examples/example_02_entity_service.py
"""

import json
import sqlite3
import tempfile
from pathlib import Path

from example_01_compile_queries import ONTOLOGY

from ontoquery import EntityService, QueryBuilder, field_ref, load_ontology

DDL = """
CREATE TABLE regions (id TEXT PRIMARY KEY, name TEXT);
CREATE TABLE suppliers (id TEXT PRIMARY KEY, name TEXT, inn TEXT, rating INTEGER, region_id TEXT);
CREATE TABLE contacts (id TEXT PRIMARY KEY, email TEXT, supplier_id TEXT, is_deleted INTEGER DEFAULT 0);
"""


def main():
    """Run the entity service example."""
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "ontology.json"
        path.write_text(json.dumps(ONTOLOGY))
        ontology = load_ontology(path)

    conn = sqlite3.connect(":memory:")
    conn.executescript(DDL)
    service = EntityService(conn, QueryBuilder(ontology))

    north = service.create_entity("region", {"name": "North"})
    for name, inn, rating in [("Acme", "7701", 5), ("Globex", "7702", 2), ("Initech", "5001", 4)]:
        service.create_entity(
            "supplier", {"name": name, "inn": inn, "rating": rating, "regionId": north["id"]}
        )

    page = service.find_entities(
        "supplier", ["name", "rating", "regionName"], field_ref("rating") > 3, sort_by="rating", sort_dir="DESC"
    )
    print(f"{page.total_elements} suppliers rated above 3:")
    for row in page.content:
        print(f"  {row}")

    acme_id = service.find_single_entity_id("supplier", field_ref("inn") == "7701")
    print("Updated:", service.update_entity("supplier", acme_id, {"rating": 3}))
    print("Deleted:", service.delete_entity("supplier", acme_id))

    conn.close()


if __name__ == "__main__":
    main()
