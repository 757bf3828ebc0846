"""Tests for scalar mapping, name sanitizers and composite resolution."""

import pytest

from gql_restgen.core.nodes import ArrayNode, CompositeNode, EnumNode, ObjectNode, ScalarNode
from gql_restgen.core.parser import SchemaNodeParser
from gql_restgen.core.type_mapper import (
    capitalize,
    describe,
    extract_string_field_paths,
    generate_type_name,
    is_required,
    resolve_composite,
    sanitize_enum_value,
    sanitize_field_name,
    scalar_of,
    singularize,
)


class TestScalarOf:
    """Tests for scalar_of."""

    @pytest.mark.parametrize("node,expected", [
        (ScalarNode(type="string", format="uuid"), "ID"),
        (ScalarNode(type="string", format="date-time"), "String"),
        (ScalarNode(type="string", format="email"), "String"),
        (ScalarNode(type="integer"), "Int"),
        (ScalarNode(type="number"), "Float"),
        (ScalarNode(type="boolean"), "Boolean"),
        (ScalarNode(type="string"), "String"),
    ])
    def test_known_types(self, node, expected):
        assert scalar_of(node) == expected

    def test_format_wins_over_type(self):
        assert scalar_of(ScalarNode(type="integer", format="uuid")) == "ID"

    def test_unknown_input_is_string(self):
        """Anything unrecognized degrades to String instead of failing."""
        assert scalar_of(ScalarNode(type="null")) == "String"
        assert scalar_of(ScalarNode()) == "String"
        assert scalar_of(None) == "String"
        assert scalar_of(ObjectNode()) == "String"
        assert scalar_of(ArrayNode()) == "String"


class TestSanitizeEnumValue:
    """Tests for sanitize_enum_value."""

    @pytest.mark.parametrize("value,expected", [
        ("active", "active"),
        ("in-progress", "in_progress"),
        ("on hold", "on_hold"),
        ("v1.2", "v1_2"),
        ("a/b", "ab"),
        ("2fa", "_2fa"),
        ("3rd_party", "_3rd_party"),
        ("__typename", "_typename"),
        ("ÄÖ", "unknown"),
        ("", "unknown"),
    ])
    def test_strings(self, value, expected):
        assert sanitize_enum_value(value) == expected

    def test_non_strings_are_converted(self):
        assert sanitize_enum_value(True) == "true"
        assert sanitize_enum_value(False) == "false"
        assert sanitize_enum_value(None) == "null"
        assert sanitize_enum_value(3) == "_3"
        assert sanitize_enum_value(1.5) == "_1_5"

    def test_preserves_case(self):
        assert sanitize_enum_value("InProgress") == "InProgress"


class TestSanitizeFieldName:
    """Tests for sanitize_field_name."""

    @pytest.mark.parametrize("name,expected", [
        ("firstName", "firstName"),
        ("first-name", "first_name"),
        ("zip code", "zip_code"),
        ("1st", "_1st"),
        ("__v", "_v"),
        ("___id", "_id"),
        ("_id", "_id"),
        ("", "unknown"),
    ])
    def test_names(self, name, expected):
        assert sanitize_field_name(name) == expected


class TestTypeNames:
    """Tests for capitalize and generate_type_name."""

    def test_capitalize_first_character_only(self):
        assert capitalize("firstName") == "FirstName"
        assert capitalize("") == ""

    def test_prefixed_name(self):
        assert generate_type_name("name", "Person") == "PersonName"
        assert generate_type_name("tagsItem", "Person") == "PersonTagsItem"

    def test_unprefixed_name_is_capitalized(self):
        assert generate_type_name("person") == "Person"

    def test_invalid_characters_are_stripped(self):
        assert generate_type_name("zip-code", "Household") == "HouseholdZipcode"

    def test_leading_digit(self):
        assert generate_type_name("1st") == "_1st"

    def test_double_underscore_prefix(self):
        assert generate_type_name("__meta") == "_meta"
        assert generate_type_name("__v", "Person") == "Person__v"

    def test_deterministic(self):
        assert generate_type_name("status", "Person") == generate_type_name("status", "Person")


class TestSingularize:
    """The module-level singularize delegates to the default strategy."""

    def test_heuristic(self):
        assert singularize("persons") == "person"
        assert singularize("categories") == "category"
        assert singularize("addresses") == "address"


class TestResolveComposite:
    """Tests for resolve_composite."""

    def test_all_of_merges_in_order(self):
        first = ObjectNode(properties={"a": ScalarNode(type="string")}, required=("a",))
        second = ObjectNode(
            properties={"b": ScalarNode(type="string"), "a": ScalarNode(type="integer")},
            required=("b",),
        )
        merged = resolve_composite(CompositeNode(kind="allOf", branches=(first, second)))

        assert isinstance(merged, ObjectNode)
        assert list(merged.properties) == ["a", "b"]
        # Later branches overwrite
        assert merged.properties["a"] == ScalarNode(type="integer")
        assert merged.required == ("a", "b")

    def test_all_of_ignores_non_object_branches(self):
        branch = ObjectNode(properties={"a": ScalarNode(type="string")})
        merged = resolve_composite(CompositeNode(kind="allOf", branches=(ScalarNode(type="string"), branch)))
        assert list(merged.properties) == ["a"]

    @pytest.mark.parametrize("kind", ["anyOf", "oneOf"])
    def test_first_branch_wins(self, kind):
        node = CompositeNode(kind=kind, branches=(ScalarNode(type="string"), ScalarNode(type="integer")))
        assert resolve_composite(node) == ScalarNode(type="string")

    def test_nested_composites(self):
        inner = CompositeNode(kind="oneOf", branches=(
            ObjectNode(properties={"x": ScalarNode(type="string")}),
            ObjectNode(properties={"y": ScalarNode(type="string")}),
        ))
        outer = CompositeNode(kind="allOf", branches=(inner, ObjectNode(properties={"z": ScalarNode()})))
        assert list(resolve_composite(outer).properties) == ["x", "z"]

    def test_concrete_nodes_pass_through(self):
        node = ScalarNode(type="boolean")
        assert resolve_composite(node) is node

    def test_self_containing_all_of_resolves_to_empty_object(self):
        raw = {"allOf": []}
        raw["allOf"].append(raw)
        node = SchemaNodeParser().parse(raw)
        assert resolve_composite(node) == ObjectNode()


class TestExtractStringFieldPaths:
    """Tests for extract_string_field_paths."""

    def test_person_paths(self, person_raw):
        node = SchemaNodeParser().parse(person_raw)
        # status is an enum and tags an array: neither is searchable
        assert extract_string_field_paths(node) == ["id", "name.firstName", "name.lastName"]

    def test_raw_property_names_are_kept(self, household_raw):
        node = SchemaNodeParser().parse(household_raw)
        assert extract_string_field_paths(node) == ["id", "label", "zip-code"]

    def test_prefix(self, household_raw):
        node = SchemaNodeParser().parse(household_raw)
        assert extract_string_field_paths(node, prefix="home") == ["home.id", "home.label", "home.zip-code"]

    def test_depth_bound(self, person_raw):
        node = SchemaNodeParser().parse(person_raw)
        assert extract_string_field_paths(node, max_depth=1) == ["id"]

    def test_cyclic_schema_stops_at_depth(self):
        raw = {"type": "object", "properties": {"id": {"type": "string"}}}
        raw["properties"]["parent"] = raw
        node = SchemaNodeParser().parse(raw)
        assert extract_string_field_paths(node) == [
            "id",
            "parent.id",
            "parent.parent.id",
            "parent.parent.parent.id",
        ]

    def test_composites_are_resolved(self):
        node = SchemaNodeParser().parse({
            "allOf": [
                {"type": "object", "properties": {"title": {"type": "string"}}},
                {"type": "object", "properties": {"meta": {"oneOf": [
                    {"type": "object", "properties": {"note": {"type": "string"}}},
                    {"type": "string"},
                ]}}},
            ]
        })
        assert extract_string_field_paths(node) == ["title", "meta.note"]

    def test_non_object_has_no_paths(self):
        assert extract_string_field_paths(ScalarNode(type="string")) == []
        assert extract_string_field_paths(None) == []


class TestHelpers:
    """Tests for is_required and describe."""

    def test_is_required(self):
        node = ObjectNode(properties={"a": ScalarNode()}, required=("a",))
        assert is_required(node, "a")
        assert not is_required(node, "b")

    def test_describe(self):
        assert describe(ArrayNode()) == "array"
        assert describe(ScalarNode()) == "scalar"
        assert describe(EnumNode(values=("a",))) == "enum"
        assert describe(CompositeNode(kind="oneOf")) == "oneOf"
        assert describe(None) == "missing"
