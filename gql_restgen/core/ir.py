"""Intermediate Representation (IR) of the generated GraphQL schema.

The compiler fills these dataclasses and renders them to SDL. The IR is also
what the resolver binder reads to learn which resources were compiled and
which fields were renamed during sanitization.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import TypeNameCollisionError


@dataclass
class IRArgument:
    """Represents an argument to a Query field."""
    name: str
    type_name: str
    is_optional: bool = True

    @property
    def sdl(self) -> str:
        return f"{self.name}: {self.type_name}{'' if self.is_optional else '!'}"


@dataclass
class IRField:
    """Represents a field in a generated object or input type."""
    name: str
    type_name: str
    is_list: bool = False
    is_optional: bool = True  # True if nullable (no ! in GraphQL)
    is_item_optional: bool = True  # Nullability of list items
    arguments: list[IRArgument] = field(default_factory=list)
    # Property name in the source schema, before sanitization
    source_name: str | None = None

    @property
    def sdl_type(self) -> str:
        """The GraphQL type reference, e.g. ``[Person!]!``."""
        type_ref = self.type_name
        if self.is_list:
            type_ref = f"[{type_ref}{'' if self.is_item_optional else '!'}]"
        if not self.is_optional:
            type_ref = f"{type_ref}!"
        return type_ref

    @property
    def is_renamed(self) -> bool:
        return self.source_name is not None and self.source_name != self.name


@dataclass
class IREnumValue:
    """A single enum value and the raw value it stands for in stored records."""
    name: str
    value: Any = None


@dataclass
class IREnum:
    """Represents a generated GraphQL enum type."""
    name: str
    values: list[IREnumValue]
    # Raw values whose sanitized name repeats an earlier value, serialized under that name
    aliases: list[IREnumValue] = field(default_factory=list)


@dataclass
class IRType:
    """Represents a generated GraphQL object type or input type."""
    name: str
    fields: list[IRField]
    is_input: bool = False

    @property
    def keyword(self) -> str:
        return "input" if self.is_input else "type"

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)


@dataclass
class IRResource:
    """A resource that compiled successfully, with its Query field names."""
    name: str
    type_name: str
    list_field: str
    single_field: str
    searchable_fields: list[str] = field(default_factory=list)

    @property
    def connection_type(self) -> str:
        return f"{self.type_name}Connection"

    @property
    def filter_type(self) -> str:
        return f"{self.type_name}Filter"


@dataclass
class IRSchema:
    """Complete intermediate representation of the generated schema.

    The ``types`` dict keeps insertion order: a nested type is added when it
    is finished, so it precedes the type that references it.
    """
    enums: dict[str, IREnum] = field(default_factory=dict)
    types: dict[str, IRType] = field(default_factory=dict)
    inputs: dict[str, IRType] = field(default_factory=dict)
    query_fields: list[IRField] = field(default_factory=list)
    resources: list[IRResource] = field(default_factory=list)

    @property
    def searchable_fields(self) -> dict[str, list[str]]:
        """Map of resource name to searchable dot-paths."""
        return {r.name: list(r.searchable_fields) for r in self.resources}

    def has_query_field(self, name: str) -> bool:
        return any(f.name == name for f in self.query_fields)


class VisitState(Enum):
    """Progress of a generated name through compilation."""
    VISITING = "visiting"
    DONE = "done"


class CompilationContext:
    """State of a single compilation run.

    Owns the IR being built plus the bookkeeping needed to build it safely:
    which generated name came from which schema node (collision detection),
    which names are still under construction (cycles), and a cache of
    resolved composite nodes so a node keeps one identity during the run.
    A context is created per ``SchemaCompiler.compile`` call and dropped
    afterwards.
    """

    def __init__(self):
        self.ir = IRSchema()
        self._sources: dict[str, tuple[str, Any]] = {}
        self._states: dict[str, VisitState] = {}
        # id(object node) -> type name, for object nodes still being visited
        self.visiting_nodes: dict[int, str] = {}
        self.resolved: dict[int, Any] = {}

    def is_claimed(self, name: str, kind: str, source: Any) -> bool:
        """Check whether ``name`` is already generated from an equal source.

        Raises:
            TypeNameCollisionError: if the name belongs to a different kind
                of definition or to a structurally different source node.
        """
        existing = self._sources.get(name)
        if existing is None:
            return False
        existing_kind, existing_source = existing
        if existing_kind != kind or not (existing_source is source or existing_source == source):
            raise TypeNameCollisionError(name, existing_kind, kind)
        return True

    def claim(self, name: str, kind: str, source: Any):
        """Reserve a name before its definition is built."""
        self._sources[name] = (kind, source)
        self._states[name] = VisitState.VISITING

    def state(self, name: str) -> VisitState | None:
        return self._states.get(name)

    def add_enum(self, enum: IREnum):
        self.ir.enums[enum.name] = enum
        self._states[enum.name] = VisitState.DONE

    def add_type(self, ir_type: IRType):
        if ir_type.is_input:
            self.ir.inputs[ir_type.name] = ir_type
        else:
            self.ir.types[ir_type.name] = ir_type
        self._states[ir_type.name] = VisitState.DONE
