"""GraphQL service assembly.

Compiles resource specs, binds resolvers to a store and wraps the result in
an executable graphql-core schema. The service is transport agnostic: hosts
pass the decoded request body to ``handle`` and serialize the returned
``{"data": ..., "errors": [...]}`` mapping however they like.

Example:
    service = create_graphql_service(specs, InMemoryResourceStore(records))
    response = service.handle({"query": "{ persons { total } }"}, headers=request.headers)
"""

import logging
from collections.abc import Iterable, Mapping
from inspect import isawaitable
from typing import Any

from graphql import (
    DocumentNode,
    ExecutionResult,
    GraphQLEnumType,
    GraphQLError,
    GraphQLObjectType,
    GraphQLSchema,
    NoSchemaIntrospectionCustomRule,
    assert_valid_schema,
    build_schema,
    execute,
    execute_sync,
    parse,
    specified_rules,
    validate,
)

from .compiler import CompiledSchema, SchemaCompiler
from .config import ResourceSpec, ServiceConfig
from .errors import (
    BAD_REQUEST,
    BAD_USER_INPUT,
    GRAPHQL_PARSE_FAILED,
    GRAPHQL_VALIDATION_FAILED,
    INTERNAL_SERVER_ERROR,
)
from .ir import IREnum
from .naming import NamingStrategy
from .resolvers import Resolver, ResolverBinder
from .store import ResourceStore

logger = logging.getLogger(__name__)

MASKED_MESSAGE = "Internal server error"


def format_error(error: GraphQLError, default_code: str = INTERNAL_SERVER_ERROR, mask_internal: bool = False) -> dict[str, Any]:
    """Reduce an error to ``message``, ``locations``, ``path`` and ``extensions.code``.

    Field errors without an explicit code are internal errors: they are
    logged here with their traceback and never leave the process with more
    than their message.
    """
    code = (error.extensions or {}).get("code")
    if code is None:
        code = INTERNAL_SERVER_ERROR if error.path is not None else default_code

    message = error.message
    if code == INTERNAL_SERVER_ERROR:
        path = ".".join(str(segment) for segment in error.path or [])
        logger.error("GraphQL internal error at %s: %s", path or "<root>", error.message, exc_info=error.original_error or False)
        if mask_internal:
            message = MASKED_MESSAGE

    formatted: dict[str, Any] = {"message": message}
    if error.locations:
        formatted["locations"] = [{"line": loc.line, "column": loc.column} for loc in error.locations]
    if error.path is not None:
        formatted["path"] = list(error.path)
    formatted["extensions"] = {"code": code}
    return formatted


def build_context(headers: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Context factory: resolvers see the inbound request headers."""
    return {"headers": dict(headers or {})}


def make_executable_schema(
    sdl: str,
    resolvers: Mapping[str, Mapping[str, Resolver]],
    enums: Iterable[IREnum] = (),
) -> GraphQLSchema:
    """Build a graphql-core schema from SDL and attach the resolvers.

    Enum values get the raw store values as their internal values, so a
    record holding ``"in-progress"`` serializes as ``in_progress``.

    Raises:
        TypeError: if the SDL builds a schema GraphQL considers invalid
        ValueError: if a resolver targets an unknown type or field
    """
    schema = build_schema(sdl)
    assert_valid_schema(schema)

    for type_name, fields in resolvers.items():
        graphql_type = schema.get_type(type_name)
        if not isinstance(graphql_type, GraphQLObjectType):
            raise ValueError(f"Resolvers given for unknown object type: {type_name}")
        for field_name, resolver in fields.items():
            if field_name not in graphql_type.fields:
                raise ValueError(f"Resolver given for unknown field: {type_name}.{field_name}")
            graphql_type.fields[field_name].resolve = resolver

    for ir_enum in enums:
        enum_type = schema.get_type(ir_enum.name)
        if not isinstance(enum_type, GraphQLEnumType):
            continue
        for value in ir_enum.values:
            enum_type.values[value.name].value = value.value

    return schema


class GraphQLService:
    """Executes GraphQL requests against a compiled resource schema."""

    def __init__(
        self,
        schema: GraphQLSchema,
        compiled: CompiledSchema,
        resolvers: Mapping[str, Mapping[str, Resolver]],
        config: ServiceConfig | None = None,
    ):
        self.schema = schema
        self.compiled = compiled
        self.resolvers = resolvers
        self.config = config or ServiceConfig()
        self._rules = None if self.config.introspection else [*specified_rules, NoSchemaIntrospectionCustomRule]

    @property
    def sdl(self) -> str:
        return self.compiled.sdl

    def _error_response(self, errors: list[GraphQLError], default_code: str) -> dict[str, Any]:
        return {
            "data": None,
            "errors": [format_error(e, default_code, self.config.mask_internal_errors) for e in errors],
        }

    def _prepare(self, query: str) -> tuple[DocumentNode | None, dict[str, Any] | None]:
        """Parse and validate; returns the document or a ready error response."""
        try:
            document = parse(query)
        except GraphQLError as error:
            return None, self._error_response([error], GRAPHQL_PARSE_FAILED)

        errors = validate(self.schema, document, self._rules)
        if errors:
            return None, self._error_response(errors, GRAPHQL_VALIDATION_FAILED)
        return document, None

    def _response(self, result: ExecutionResult) -> dict[str, Any]:
        response: dict[str, Any] = {"data": result.data}
        if result.errors:
            response["errors"] = [
                format_error(e, BAD_USER_INPUT, self.config.mask_internal_errors) for e in result.errors
            ]
        return response

    def execute(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
        context: Any = None,
    ) -> dict[str, Any]:
        """Execute a query synchronously.

        Returns:
            ``{"data": ...}`` plus ``"errors"`` when any occurred
        """
        document, failure = self._prepare(query)
        if failure is not None:
            return failure
        result = execute_sync(
            self.schema,
            document,
            variable_values=variables,
            operation_name=operation_name,
            context_value=context if context is not None else build_context(),
        )
        return self._response(result)

    async def execute_async(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
        context: Any = None,
    ) -> dict[str, Any]:
        """Execute a query on an event loop; resolvers may return awaitables."""
        document, failure = self._prepare(query)
        if failure is not None:
            return failure
        result = execute(
            self.schema,
            document,
            variable_values=variables,
            operation_name=operation_name,
            context_value=context if context is not None else build_context(),
        )
        if isawaitable(result):
            result = await result
        return self._response(result)

    def handle(self, payload: Any, headers: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Handle a decoded POST body ``{"query", "variables", "operationName"}``."""
        request = self._read_request(payload)
        if "errors" in request:
            return request
        return self.execute(
            request["query"], request["variables"], request["operation_name"], build_context(headers)
        )

    async def handle_async(self, payload: Any, headers: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Async variant of ``handle``."""
        request = self._read_request(payload)
        if "errors" in request:
            return request
        return await self.execute_async(
            request["query"], request["variables"], request["operation_name"], build_context(headers)
        )

    @staticmethod
    def _read_request(payload: Any) -> dict[str, Any]:
        def bad_request(message: str) -> dict[str, Any]:
            return {"data": None, "errors": [{"message": message, "extensions": {"code": BAD_REQUEST}}]}

        if not isinstance(payload, Mapping):
            return bad_request("Request body must be a JSON object.")
        query = payload.get("query")
        if not isinstance(query, str) or not query.strip():
            return bad_request("Must provide query string.")
        variables = payload.get("variables")
        if variables is not None and not isinstance(variables, Mapping):
            return bad_request("Variables must be an object.")
        operation_name = payload.get("operationName")
        if operation_name is not None and not isinstance(operation_name, str):
            return bad_request("Operation name must be a string.")
        return {"query": query, "variables": variables, "operation_name": operation_name}


def create_graphql_service(
    specs: Iterable[ResourceSpec],
    store: ResourceStore,
    config: ServiceConfig | None = None,
    naming: NamingStrategy | None = None,
) -> GraphQLService:
    """Compile the resource specs, bind resolvers to ``store`` and build the service."""
    specs = list(specs)
    config = config or ServiceConfig()

    logger.info("Generating GraphQL schema for %d resources", len(specs))
    compiled = SchemaCompiler(naming=naming, search_depth=config.search_depth).compile(specs)

    logger.info("Creating GraphQL resolvers")
    resolvers = ResolverBinder(specs, compiled, store).build()

    schema = make_executable_schema(compiled.sdl, resolvers, compiled.ir.enums.values())
    return GraphQLService(schema, compiled, resolvers, config)


def get_graphql_schema_sdl(specs: Iterable[ResourceSpec], naming: NamingStrategy | None = None) -> str:
    """Return the SDL without building a service (introspection, snapshots)."""
    return SchemaCompiler(naming=naming).compile(specs).sdl
