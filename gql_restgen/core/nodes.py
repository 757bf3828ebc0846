"""Tagged schema-node variants.

Raw JSON-Schema dictionaries are parsed once into these classes (see
``parser.SchemaNodeParser``) so the compiler can dispatch on the node class
instead of probing optional keys over and over.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ScalarNode:
    """A leaf value: string, integer, number, boolean or an unknown type."""
    type: str | None = None
    format: str | None = None


@dataclass(frozen=True)
class EnumNode:
    """A closed set of values (``enum: [...]``)."""
    values: tuple[Any, ...] = ()
    type: str | None = None


@dataclass(frozen=True)
class ObjectNode:
    """An object with named properties."""
    properties: dict[str, "SchemaNode"] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    # Passed through untouched; it never produces GraphQL fields
    additional_properties: Any = None


@dataclass(frozen=True)
class ArrayNode:
    """A list; ``items`` is None when the schema omits it."""
    items: "SchemaNode | None" = None


@dataclass(frozen=True)
class CompositeNode:
    """An ``allOf``, ``anyOf`` or ``oneOf`` composition."""
    kind: str
    branches: tuple["SchemaNode", ...] = ()


@dataclass(frozen=True, eq=False)
class RefNode:
    """Forward reference to a node that was still being parsed.

    Emitted when a raw schema refers back to one of its ancestors (a cycle
    left behind by ``$ref`` resolution). Compared by identity.
    """
    key: int
    table: dict[int, "SchemaNode"] = field(repr=False)

    @property
    def target(self) -> "SchemaNode":
        """The referenced node, available once parsing has finished."""
        return self.table[self.key]


SchemaNode = Union[ScalarNode, EnumNode, ObjectNode, ArrayNode, CompositeNode, RefNode]


def deref(node: SchemaNode | None) -> SchemaNode | None:
    """Follow reference nodes until a concrete node is reached."""
    while isinstance(node, RefNode):
        node = node.target
    return node
