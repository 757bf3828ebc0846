#!/usr/bin/env python3
"""Demonstration of the compiled GraphQL API.

This script shows how to:
1. Describe REST resources with JSON schemas
2. Compile them into a GraphQL schema
3. Query an in-memory store through the generated API

Note: This demo doesn't talk to a real backend - swap the store for
HttpResourceStore("http://localhost:1080") to query a running REST API.
"""

import json

from gql_restgen.core import (
    InMemoryResourceStore,
    ResourceSpec,
    create_graphql_service,
)

SPECS = [
    ResourceSpec(
        name="persons",
        schemas={
            "Person": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "name": {
                        "type": "object",
                        "properties": {
                            "firstName": {"type": "string"},
                            "lastName": {"type": "string"},
                        },
                    },
                    "status": {"type": "string", "enum": ["active", "on-leave"]},
                },
            },
        },
        pagination={"limitDefault": 10},
    ),
    ResourceSpec(
        name="households",
        schemas={
            "Household": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "address": {"type": "string"},
                },
            },
        },
    ),
]

RECORDS = {
    "persons": [
        {"id": "p-1", "name": {"firstName": "Ada", "lastName": "Lovelace"}, "status": "active"},
        {"id": "p-2", "name": {"firstName": "Charles", "lastName": "Babbage"}, "status": "on-leave"},
    ],
    "households": [
        {"id": "h-1", "address": "12 St James's Square"},
    ],
}


def main():
    print("=== Compiled GraphQL API Demo ===\n")

    print("1. Compiling resource schemas...")
    service = create_graphql_service(SPECS, InMemoryResourceStore(RECORDS))
    print(f"   {len(service.compiled.resources)} resources")
    for resource, fields in service.compiled.searchable_fields.items():
        print(f"   {resource}: searchable {', '.join(fields)}")

    print("\n2. Generated schema:\n")
    print(service.sdl)

    print("\n3. Example: search a single resource")
    response = service.execute('{ persons(search: "bab") { total items { id status name { lastName } } } }')
    print(json.dumps(response, indent=2))

    print("\n4. Example: search across resources")
    response = service.execute('{ search(query: "s") { persons { id } households { id } totalCount } }')
    print(json.dumps(response, indent=2))


if __name__ == "__main__":
    main()
