"""Core modules for compiling REST resource schemas into a GraphQL API."""

from .compiler import (
    CompiledSchema,
    SchemaCompiler,
    build_searchable_fields_map,
    find_main_schema,
    generate_graphql_schema,
)
from .config import (
    DEFAULT_PAGINATION,
    PaginationConfig,
    ResourceSpec,
    ServiceConfig,
    load_resource_specs,
)
from .errors import (
    BAD_REQUEST,
    BAD_USER_INPUT,
    GRAPHQL_PARSE_FAILED,
    GRAPHQL_VALIDATION_FAILED,
    INTERNAL_SERVER_ERROR,
    SchemaCompilationError,
    StoreError,
    TypeNameCollisionError,
)
from .http_store import HttpResourceStore
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
from .naming import DEFAULT_NAMING, EnglishNaming, IrregularNaming, NamingStrategy
from .nodes import (
    ArrayNode,
    CompositeNode,
    EnumNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    SchemaNode,
)
from .parser import SchemaNodeParser
from .resolvers import ResolverBinder
from .server import (
    GraphQLService,
    build_context,
    create_graphql_service,
    format_error,
    get_graphql_schema_sdl,
    make_executable_schema,
)
from .store import InMemoryResourceStore, ResourceStore

__all__ = [
    # Config
    "DEFAULT_PAGINATION",
    "PaginationConfig",
    "ResourceSpec",
    "ServiceConfig",
    "load_resource_specs",
    # Errors
    "SchemaCompilationError",
    "TypeNameCollisionError",
    "StoreError",
    "BAD_REQUEST",
    "BAD_USER_INPUT",
    "GRAPHQL_PARSE_FAILED",
    "GRAPHQL_VALIDATION_FAILED",
    "INTERNAL_SERVER_ERROR",
    # Schema nodes
    "ArrayNode",
    "CompositeNode",
    "EnumNode",
    "ObjectNode",
    "RefNode",
    "ScalarNode",
    "SchemaNode",
    "SchemaNodeParser",
    # Naming
    "NamingStrategy",
    "EnglishNaming",
    "IrregularNaming",
    "DEFAULT_NAMING",
    # IR types
    "CompilationContext",
    "IRArgument",
    "IREnum",
    "IREnumValue",
    "IRField",
    "IRResource",
    "IRSchema",
    "IRType",
    # Compiler
    "CompiledSchema",
    "SchemaCompiler",
    "build_searchable_fields_map",
    "find_main_schema",
    "generate_graphql_schema",
    # Stores
    "ResourceStore",
    "InMemoryResourceStore",
    "HttpResourceStore",
    # Resolvers
    "ResolverBinder",
    # Server
    "GraphQLService",
    "build_context",
    "create_graphql_service",
    "format_error",
    "get_graphql_schema_sdl",
    "make_executable_schema",
]
