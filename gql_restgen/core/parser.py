"""Schema node parser.

Turns the raw, JSON-Schema flavored dictionaries produced by the OpenAPI
loader into the tagged variants of ``nodes``.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .nodes import (
    ArrayNode,
    CompositeNode,
    EnumNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    SchemaNode,
)

logger = logging.getLogger(__name__)


class SchemaNodeParser:
    """Parses raw schema dictionaries into ``SchemaNode`` values.

    A parser memoizes by object identity, so a raw dictionary shared by
    several properties (a resolved ``$ref``) maps to a single node, and a
    dictionary that contains itself yields a ``RefNode`` back to its
    ancestor instead of recursing forever.

    Example:
        parser = SchemaNodeParser()
        node = parser.parse({"type": "object", "properties": {"id": {"type": "string"}}})
    """

    def __init__(self):
        self._parsed: dict[int, SchemaNode] = {}
        self._in_progress: set[int] = set()

    def parse(self, raw: Any) -> SchemaNode:
        """Parse one raw schema node (and everything below it)."""
        if not isinstance(raw, Mapping):
            # Booleans, None and other non-schemas carry no type information
            return ScalarNode()

        key = id(raw)
        if key in self._parsed:
            return self._parsed[key]
        if key in self._in_progress:
            return RefNode(key=key, table=self._parsed)

        self._in_progress.add(key)
        try:
            node = self._parse_mapping(raw)
        finally:
            self._in_progress.discard(key)
        self._parsed[key] = node
        return node

    def parse_all(self, schemas: Mapping[str, Any]) -> dict[str, SchemaNode]:
        """Parse every named schema of a resource."""
        return {name: self.parse(raw) for name, raw in schemas.items()}

    def _parse_mapping(self, raw: Mapping[str, Any]) -> SchemaNode:
        all_of = raw.get("allOf")
        if isinstance(all_of, list):
            return CompositeNode(kind="allOf", branches=tuple(self.parse(b) for b in all_of))

        for kind in ("anyOf", "oneOf"):
            branches = raw.get(kind)
            if isinstance(branches, list) and branches:
                return CompositeNode(kind=kind, branches=tuple(self.parse(b) for b in branches))

        schema_type = self._get_type(raw)

        values = raw.get("enum")
        if isinstance(values, list):
            return EnumNode(values=tuple(values), type=schema_type)

        if schema_type == "array":
            items = raw.get("items")
            return ArrayNode(items=self.parse(items) if items is not None else None)

        if schema_type == "object" or "properties" in raw:
            return self._parse_object(raw)

        return ScalarNode(type=schema_type, format=raw.get("format"))

    def _parse_object(self, raw: Mapping[str, Any]) -> ObjectNode:
        properties = raw.get("properties") or {}
        if not isinstance(properties, Mapping):
            logger.debug("Ignoring non-mapping 'properties': %r", properties)
            properties = {}
        required = raw.get("required") or []
        additional = raw.get("additionalProperties")
        if isinstance(additional, Mapping):
            additional = self.parse(additional)
        return ObjectNode(
            properties={str(name): self.parse(prop) for name, prop in properties.items()},
            required=tuple(str(name) for name in required),
            additional_properties=additional,
        )

    @staticmethod
    def _get_type(raw: Mapping[str, Any]) -> str | None:
        """Read ``type``, taking the first non-null entry of a type list."""
        schema_type = raw.get("type")
        if isinstance(schema_type, list):
            for candidate in schema_type:
                if candidate != "null":
                    return candidate
            return None
        return schema_type
