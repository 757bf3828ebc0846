"""Shared fixtures: a small people/households API and its records."""

import pytest

from gql_restgen.core.config import ResourceSpec
from gql_restgen.core.store import InMemoryResourceStore


# =============================================================================
# Schemas
# =============================================================================


def person_schema():
    return {
        "type": "object",
        "required": ["id", "name"],
        "properties": {
            "id": {"type": "string", "format": "uuid"},
            "name": {
                "type": "object",
                "required": ["firstName"],
                "properties": {
                    "firstName": {"type": "string"},
                    "lastName": {"type": "string"},
                },
            },
            "age": {"type": "integer"},
            "status": {"type": "string", "enum": ["active", "in-progress"]},
            "tags": {"type": "array", "items": {"type": "string"}},
        },
    }


def household_schema():
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "label": {"type": "string"},
            "zip-code": {"type": "string"},
        },
    }


def counter_schema():
    return {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "value": {"type": "number"},
        },
    }


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def person_raw():
    return person_schema()


@pytest.fixture
def household_raw():
    return household_schema()


@pytest.fixture
def person_spec():
    """The persons resource with a Create variant that must be ignored."""
    return ResourceSpec(
        name="persons",
        schemas={
            "PersonCreate": {"type": "object", "properties": {"name": {"type": "string"}}},
            "Person": person_schema(),
        },
        pagination={"limitDefault": 2, "limitMax": 10},
    )


@pytest.fixture
def household_spec():
    return ResourceSpec(name="households", schemas={"Household": household_schema()})


@pytest.fixture
def counter_spec():
    """A resource without any string field, hence nothing to search."""
    return ResourceSpec(name="counters", schemas={"Counter": counter_schema()})


@pytest.fixture
def specs(person_spec, household_spec, counter_spec):
    return [person_spec, household_spec, counter_spec]


@pytest.fixture
def records():
    return {
        "persons": [
            {"id": "p-1", "name": {"firstName": "Ada", "lastName": "Lovelace"}, "age": 36, "status": "active"},
            {"id": "p-2", "name": {"firstName": "Alan", "lastName": "Turing"}, "age": 41, "status": "in-progress"},
            {"id": "p-3", "name": {"firstName": "Grace", "lastName": "Hopper"}, "age": 85, "status": "active"},
        ],
        "households": [
            {"id": "h-1", "label": "Lovelace home", "zip-code": "12345"},
            {"id": "h-2", "label": "Turing flat", "zip-code": "54321"},
        ],
        "counters": [
            {"id": 1, "value": 1.5},
        ],
    }


@pytest.fixture
def store(records):
    return InMemoryResourceStore(records)
