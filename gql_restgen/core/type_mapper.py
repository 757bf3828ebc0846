"""Pure mapping helpers from schema nodes to GraphQL names and scalars.

GraphQL names must match ``[_A-Za-z][_0-9A-Za-z]*``; everything coming out
of a REST schema (property names, enum values, resource names) goes through
one of the sanitizers below before it reaches the SDL.
"""

import logging
import re

from .naming import DEFAULT_NAMING
from .nodes import (
    ArrayNode,
    CompositeNode,
    EnumNode,
    ObjectNode,
    ScalarNode,
    SchemaNode,
    deref,
)

logger = logging.getLogger(__name__)

FORMAT_SCALARS = {
    "uuid": "ID",
    "date": "String",
    "date-time": "String",
    "email": "String",
    "uri": "String",
}

TYPE_SCALARS = {
    "string": "String",
    "integer": "Int",
    "number": "Float",
    "boolean": "Boolean",
}

DEFAULT_SCALAR = "String"

_SEPARATORS = re.compile(r"[-\s.]")
_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_]")
# GraphQL reserves names starting with "__" for introspection
_RESERVED_PREFIX = re.compile(r"^__+")


def scalar_of(node: SchemaNode | None) -> str:
    """Map a scalar node to a GraphQL scalar name; unknown input maps to String."""
    node = deref(node)
    if not isinstance(node, (ScalarNode, EnumNode)):
        return DEFAULT_SCALAR
    if isinstance(node, ScalarNode) and node.format in FORMAT_SCALARS:
        return FORMAT_SCALARS[node.format]
    return TYPE_SCALARS.get(node.type, DEFAULT_SCALAR)


def _to_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def sanitize_enum_value(value) -> str:
    """Convert an enum value into a valid GraphQL enum value name.

    Case is preserved so the names stay close to the stored values.
    """
    sanitized = _INVALID_NAME_CHARS.sub("", _SEPARATORS.sub("_", _to_text(value)))
    if sanitized[:1].isdigit():
        sanitized = "_" + sanitized
    sanitized = _RESERVED_PREFIX.sub("_", sanitized)
    return sanitized or "unknown"


def sanitize_field_name(name: str) -> str:
    """Convert a property name into a valid GraphQL field name."""
    if not name:
        return "unknown"
    sanitized = _INVALID_NAME_CHARS.sub("_", name)
    if sanitized[:1].isdigit():
        sanitized = "_" + sanitized
    return _RESERVED_PREFIX.sub("_", sanitized)


def capitalize(text: str) -> str:
    """Upper-case the first character only (``firstName`` -> ``FirstName``)."""
    if not text:
        return ""
    return text[0].upper() + text[1:]


def generate_type_name(base: str, prefix: str = "") -> str:
    """Build a GraphQL type name, e.g. ``generate_type_name("name", "Person")`` -> ``PersonName``."""
    name = f"{prefix}{capitalize(base)}" if prefix else base
    sanitized = _INVALID_NAME_CHARS.sub("", name)
    if sanitized[:1].isdigit():
        sanitized = "_" + sanitized
    return capitalize(_RESERVED_PREFIX.sub("_", sanitized))


def singularize(name: str) -> str:
    """Singular form of a resource name using the default English heuristic."""
    return DEFAULT_NAMING.singularize(name)


def is_required(node: ObjectNode, property_name: str) -> bool:
    return property_name in node.required


def resolve_composite(node: SchemaNode | None, _seen: frozenset[int] = frozenset()) -> SchemaNode | None:
    """Collapse ``allOf``/``anyOf``/``oneOf`` into a single concrete node.

    ``allOf`` branches are merged in order into one object: later branches
    overwrite properties of the same name and ``required`` lists are
    concatenated. ``anyOf`` and ``oneOf`` keep only their first branch.
    """
    node = deref(node)
    if not isinstance(node, CompositeNode):
        return node

    if id(node) in _seen:
        logger.debug("Composite schema contains itself, resolving the cycle to an empty object")
        return ObjectNode()
    seen = _seen | {id(node)}

    if node.kind == "allOf":
        properties: dict[str, SchemaNode] = {}
        required: list[str] = []
        for branch in node.branches:
            resolved = resolve_composite(branch, seen)
            if isinstance(resolved, ObjectNode):
                properties.update(resolved.properties)
                required.extend(resolved.required)
        return ObjectNode(properties=properties, required=tuple(required))

    if len(node.branches) > 1:
        logger.debug("Using the first of %d %s branches", len(node.branches), node.kind)
    return resolve_composite(node.branches[0], seen) if node.branches else None


def extract_string_field_paths(node: SchemaNode | None, prefix: str = "", max_depth: int = 4) -> list[str]:
    """Collect dot-paths to plain string leaves, e.g. ``["name.firstName", "email"]``.

    Enum and array leaves are skipped. Paths never have more than
    ``max_depth`` segments.
    """
    paths: list[str] = []
    node = resolve_composite(node)
    if max_depth <= 0 or not isinstance(node, ObjectNode):
        return paths

    for property_name, property_node in node.properties.items():
        path = f"{prefix}.{property_name}" if prefix else property_name
        resolved = resolve_composite(property_node)
        if isinstance(resolved, ScalarNode) and resolved.type == "string":
            paths.append(path)
        elif isinstance(resolved, ObjectNode) and resolved.properties:
            paths.extend(extract_string_field_paths(resolved, path, max_depth - 1))
    return paths


def describe(node: SchemaNode | None) -> str:
    """Short label of a node's variant, used in log messages."""
    node = deref(node)
    if isinstance(node, ArrayNode):
        return "array"
    if isinstance(node, CompositeNode):
        return node.kind
    if node is None:
        return "missing"
    return type(node).__name__.removesuffix("Node").lower()
