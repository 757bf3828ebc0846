"""Schema compiler: resource specs to GraphQL SDL.

Walks each resource's main schema, synthesizes object, enum, connection and
filter definitions into an ``IRSchema`` and renders it with a Jinja2
template.

Generated names follow the property path: the ``name`` object of ``Person``
becomes ``PersonName``, the items of its ``tags`` array ``PersonTagsItem``,
its ``status`` enum ``PersonStatus``.

Supports custom templates via the template_dir parameter:
    compiler = SchemaCompiler(template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .config import ResourceSpec
from .errors import TypeNameCollisionError
from .ir import (
    CompilationContext,
    IRArgument,
    IREnum,
    IREnumValue,
    IRField,
    IRResource,
    IRSchema,
    IRType,
)
from .naming import DEFAULT_NAMING, NamingStrategy
from .nodes import ArrayNode, CompositeNode, EnumNode, ObjectNode, ScalarNode, SchemaNode, deref
from .parser import SchemaNodeParser
from .type_mapper import (
    DEFAULT_SCALAR,
    capitalize,
    describe,
    extract_string_field_paths,
    generate_type_name,
    is_required,
    resolve_composite,
    sanitize_enum_value,
    sanitize_field_name,
    scalar_of,
)

logger = logging.getLogger(__name__)

# Names the compiler emits itself or that GraphQL predefines
RESERVED_TYPE_NAMES = frozenset({
    "Query", "Mutation", "Subscription", "SearchResults",
    "String", "Int", "Float", "Boolean", "ID",
})
RESERVED_QUERY_FIELDS = frozenset({"search", "totalCount"})
# GraphQL forbids these as enum values
RESERVED_ENUM_VALUES = frozenset({"true", "false", "null"})
VARIANT_SUFFIXES = ("Create", "Update", "List")


def sdl_field(field: IRField) -> str:
    """Render one field line body, e.g. ``person(id: ID!): Person``."""
    if field.arguments:
        arguments = ", ".join(arg.sdl for arg in field.arguments)
        return f"{field.name}({arguments}): {field.sdl_type}"
    return f"{field.name}: {field.sdl_type}"


def find_main_schema(schemas: Mapping[str, Any] | None, singular_name: str) -> Any:
    """Pick the schema describing the resource itself.

    An exact ``Person`` key wins; otherwise the first schema whose name
    matches case-insensitively, ignoring ``*Create``/``*Update``/``*List``
    variants.
    """
    if not schemas:
        return None

    exact = capitalize(singular_name)
    if exact in schemas:
        return schemas[exact]

    for name, schema in schemas.items():
        if name.endswith(VARIANT_SUFFIXES):
            continue
        if name.lower() == singular_name.lower():
            return schema
    return None


@dataclass
class CompiledSchema:
    """Result of a compilation run."""
    sdl: str
    ir: IRSchema

    @property
    def resources(self) -> list[IRResource]:
        return self.ir.resources

    @property
    def searchable_fields(self) -> dict[str, list[str]]:
        return self.ir.searchable_fields


class SchemaCompiler:
    """Compiles resource specs into a GraphQL schema.

    A compiler holds configuration only; every ``compile`` call works on a
    fresh ``CompilationContext``, so one instance can serve concurrent,
    independent compilations.

    Example:
        compiler = SchemaCompiler()
        compiled = compiler.compile([ResourceSpec(name="persons", schemas={...})])
        print(compiled.sdl)
    """

    TEMPLATE_NAME = "schema.graphql.j2"

    def __init__(
        self,
        naming: NamingStrategy | None = None,
        search_depth: int = 4,
        template_dir: Optional[str] = None,
    ):
        """Initialize the compiler.

        Args:
            naming: Strategy used to singularize resource names
            search_depth: Maximum number of segments of a searchable path
            template_dir: Optional directory with a custom schema template.
                          Templates here override the built-in template.
        """
        self.naming = naming or DEFAULT_NAMING
        self.search_depth = search_depth

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_restgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
        )
        self.env.filters["sdl_field"] = sdl_field

    def compile(self, specs: Iterable[ResourceSpec]) -> CompiledSchema:
        """Compile all resources and render the SDL.

        Resources that cannot be compiled are skipped with a warning.

        Raises:
            TypeNameCollisionError: if two different schemas synthesize the
                same type name, or a nested schema synthesizes a reserved one.
        """
        specs = list(specs)
        ctx = CompilationContext()
        parser = SchemaNodeParser()

        for spec in specs:
            self._compile_resource(spec, ctx, parser)

        for resource in ctx.ir.resources:
            logger.info("%s: %d searchable fields", resource.name, len(resource.searchable_fields))
        logger.info(
            "Compiled %d of %d resources (%d types, %d enums, %d inputs)",
            len(ctx.ir.resources), len(specs), len(ctx.ir.types), len(ctx.ir.enums), len(ctx.ir.inputs),
        )
        return CompiledSchema(sdl=self.render(ctx.ir), ir=ctx.ir)

    def render(self, ir: IRSchema) -> str:
        """Render the IR as SDL: enums, object types, inputs, SearchResults, Query."""
        definitions = [
            *ir.enums.values(),
            *ir.types.values(),
            *ir.inputs.values(),
            self._search_results_type(ir),
            self._query_type(ir),
        ]
        template = self.env.get_template(self.TEMPLATE_NAME)
        return template.render(definitions=definitions)

    def _compile_resource(self, spec: ResourceSpec, ctx: CompilationContext, parser: SchemaNodeParser):
        resource_name = spec.name
        singular_name = self.naming.singularize(resource_name)
        type_name = generate_type_name(singular_name)

        raw_schema = find_main_schema(spec.schemas, singular_name)
        if raw_schema is None:
            logger.warning("No main schema found for %s", resource_name)
            return

        list_field = sanitize_field_name(resource_name)
        single_field = sanitize_field_name(singular_name)
        if type_name in RESERVED_TYPE_NAMES:
            logger.warning("Skipping %s: type name %s is reserved", resource_name, type_name)
            return
        for field_name in (list_field, single_field):
            if field_name in RESERVED_QUERY_FIELDS or ctx.ir.has_query_field(field_name):
                logger.warning("Skipping %s: query field %s is already taken", resource_name, field_name)
                return
        if list_field == single_field:
            logger.warning("Skipping %s: singular and plural names are both %s", resource_name, list_field)
            return

        root = self._resolve(parser.parse(raw_schema), ctx)
        if not isinstance(root, ObjectNode):
            logger.warning("Skipping %s: main schema is %s, not an object", resource_name, describe(root))
            return

        self._compile_object(root, type_name, ctx)
        self._compile_connection(type_name, ctx)
        self._compile_filter(root, type_name, ctx)

        resource = IRResource(
            name=resource_name,
            type_name=type_name,
            list_field=list_field,
            single_field=single_field,
            searchable_fields=extract_string_field_paths(root, max_depth=self.search_depth),
        )
        ctx.ir.resources.append(resource)
        ctx.ir.query_fields.append(
            IRField(
                name=list_field,
                type_name=resource.connection_type,
                is_optional=False,
                arguments=[
                    IRArgument("search", "String"),
                    IRArgument("limit", "Int"),
                    IRArgument("offset", "Int"),
                ],
            )
        )
        ctx.ir.query_fields.append(
            IRField(
                name=single_field,
                type_name=type_name,
                arguments=[IRArgument("id", "ID", is_optional=False)],
            )
        )

    def _resolve(self, node: SchemaNode | None, ctx: CompilationContext) -> SchemaNode | None:
        """Resolve composites once per node so the result keeps its identity."""
        node = deref(node)
        if not isinstance(node, CompositeNode):
            return node
        key = id(node)
        if key not in ctx.resolved:
            ctx.resolved[key] = resolve_composite(node)
        return ctx.resolved[key]

    def _compile_type(self, node: SchemaNode | None, type_name: str, ctx: CompilationContext) -> str:
        """Compile a nested schema or array item; returns the GraphQL type name."""
        resolved = self._resolve(node, ctx)
        if isinstance(resolved, EnumNode):
            return self._compile_enum(resolved, type_name, ctx)
        if isinstance(resolved, ObjectNode):
            return self._compile_object(resolved, type_name, ctx)
        return scalar_of(resolved)

    def _compile_object(self, node: ObjectNode, type_name: str, ctx: CompilationContext) -> str:
        # Re-entering an object still under construction is a cycle; refer to it by name
        visiting = ctx.visiting_nodes.get(id(node))
        if visiting is not None:
            return visiting
        self._check_reserved(type_name, "type")
        if ctx.is_claimed(type_name, "type", node):
            return type_name

        ctx.claim(type_name, "type", node)
        ctx.visiting_nodes[id(node)] = type_name
        ir_type = IRType(name=type_name, fields=[])
        try:
            for property_name, property_node in node.properties.items():
                self._append_field(ir_type, self._compile_field(property_name, property_node, node, type_name, ctx))
        finally:
            del ctx.visiting_nodes[id(node)]

        if not ir_type.fields:
            # GraphQL forbids empty object types
            ir_type.fields.append(IRField(name="_empty", type_name=DEFAULT_SCALAR))

        ctx.add_type(ir_type)
        return type_name

    def _compile_field(
        self,
        property_name: str,
        property_node: SchemaNode,
        parent: ObjectNode,
        parent_type_name: str,
        ctx: CompilationContext,
    ) -> IRField:
        field_name = sanitize_field_name(property_name)
        field = IRField(
            name=field_name,
            type_name=DEFAULT_SCALAR,
            is_optional=not is_required(parent, property_name),
            source_name=property_name,
        )

        resolved = self._resolve(property_node, ctx)
        if isinstance(resolved, EnumNode):
            field.type_name = self._compile_enum(resolved, generate_type_name(field_name, parent_type_name), ctx)
        elif isinstance(resolved, ArrayNode):
            items = resolved.items if resolved.items is not None else ScalarNode(type="string")
            field.type_name = self._compile_type(items, generate_type_name(f"{field_name}Item", parent_type_name), ctx)
            field.is_list = True
        elif isinstance(resolved, ObjectNode):
            field.type_name = self._compile_object(resolved, generate_type_name(field_name, parent_type_name), ctx)
        else:
            field.type_name = scalar_of(resolved)
        return field

    def _compile_enum(self, node: EnumNode, type_name: str, ctx: CompilationContext) -> str:
        if not node.values:
            return DEFAULT_SCALAR
        self._check_reserved(type_name, "enum")
        if ctx.is_claimed(type_name, "enum", node):
            return type_name

        ir_enum = IREnum(name=type_name, values=[])
        seen: set[str] = set()
        for raw_value in node.values:
            name = sanitize_enum_value(raw_value)
            if name in RESERVED_ENUM_VALUES:
                name = f"_{name}"
            if name in seen:
                logger.debug("Enum value %r of %s is an alias of %s", raw_value, type_name, name)
                ir_enum.aliases.append(IREnumValue(name=name, value=raw_value))
                continue
            seen.add(name)
            ir_enum.values.append(IREnumValue(name=name, value=raw_value))

        ctx.claim(type_name, "enum", node)
        ctx.add_enum(ir_enum)
        return type_name

    def _compile_connection(self, type_name: str, ctx: CompilationContext) -> str:
        connection_name = f"{type_name}Connection"
        source = ("connection", type_name)
        if ctx.is_claimed(connection_name, "type", source):
            return connection_name

        ctx.claim(connection_name, "type", source)
        ctx.add_type(
            IRType(
                name=connection_name,
                fields=[
                    IRField("items", type_name, is_list=True, is_optional=False, is_item_optional=False),
                    IRField("total", "Int", is_optional=False),
                    IRField("limit", "Int", is_optional=False),
                    IRField("offset", "Int", is_optional=False),
                    IRField("hasNext", "Boolean", is_optional=False),
                ],
            )
        )
        return connection_name

    def _compile_filter(self, node: ObjectNode, type_name: str, ctx: CompilationContext) -> str:
        """Input type with the common arguments plus top-level scalar and enum fields."""
        filter_name = f"{type_name}Filter"
        source = ("filter", type_name)
        if ctx.is_claimed(filter_name, "input", source):
            return filter_name

        ctx.claim(filter_name, "input", source)
        ir_type = IRType(
            name=filter_name,
            fields=[
                IRField("search", "String"),
                IRField("limit", "Int"),
                IRField("offset", "Int"),
            ],
            is_input=True,
        )
        for property_name, property_node in node.properties.items():
            field_name = sanitize_field_name(property_name)
            resolved = self._resolve(property_node, ctx)
            if isinstance(resolved, EnumNode):
                enum_name = generate_type_name(field_name, type_name)
                if enum_name not in ctx.ir.enums:
                    continue
                gql_type = enum_name
            elif isinstance(resolved, ScalarNode):
                gql_type = scalar_of(resolved)
            else:
                continue
            self._append_field(ir_type, IRField(field_name, gql_type, source_name=property_name))

        ctx.add_type(ir_type)
        return filter_name

    @staticmethod
    def _append_field(ir_type: IRType, field: IRField):
        if ir_type.has_field(field.name):
            logger.debug("Skipping duplicate field %s.%s", ir_type.name, field.name)
            return
        ir_type.fields.append(field)

    @staticmethod
    def _check_reserved(type_name: str, kind: str):
        if type_name in RESERVED_TYPE_NAMES:
            raise TypeNameCollisionError(type_name, "reserved type", kind)

    @staticmethod
    def _search_results_type(ir: IRSchema) -> IRType:
        fields = [
            IRField(r.list_field, r.type_name, is_list=True, is_optional=False, is_item_optional=False)
            for r in ir.resources
        ]
        fields.append(IRField("totalCount", "Int", is_optional=False))
        return IRType(name="SearchResults", fields=fields)

    @staticmethod
    def _query_type(ir: IRSchema) -> IRType:
        search = IRField(
            name="search",
            type_name="SearchResults",
            is_optional=False,
            arguments=[
                IRArgument("query", "String", is_optional=False),
                IRArgument("limit", "Int"),
                IRArgument("offset", "Int"),
            ],
        )
        return IRType(name="Query", fields=[*ir.query_fields, search])


def build_searchable_fields_map(
    specs: Iterable[ResourceSpec],
    naming: NamingStrategy | None = None,
    max_depth: int = 4,
) -> dict[str, list[str]]:
    """Map every resource name to its searchable string paths.

    Resources without a main schema map to an empty list.
    """
    naming = naming or DEFAULT_NAMING
    parser = SchemaNodeParser()
    searchable: dict[str, list[str]] = {}
    for spec in specs:
        raw_schema = find_main_schema(spec.schemas, naming.singularize(spec.name))
        if raw_schema is None:
            searchable[spec.name] = []
        else:
            searchable[spec.name] = extract_string_field_paths(parser.parse(raw_schema), max_depth=max_depth)
    return searchable


def generate_graphql_schema(specs: Iterable[ResourceSpec], naming: NamingStrategy | None = None) -> str:
    """Compile resource specs and return only the SDL."""
    return SchemaCompiler(naming=naming).compile(specs).sdl
