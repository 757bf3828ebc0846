"""Resolver Binder - build resolvers for the compiled Query fields.

Resolvers delegate to a ``ResourceStore``:
- list fields run ``execute_search`` (free-text search when the resource has
  searchable fields, structured filters otherwise)
- single-item fields run ``find_by_id``; a missing record is ``null``
- ``search`` fans out over every compiled resource

Relationship fields (``householdId`` -> ``household``) are not wired on
purpose: mapping a singular field name back to a resource is ambiguous, so
clients issue a second query with the foreign-key id.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .compiler import CompiledSchema
from .config import DEFAULT_PAGINATION, PaginationConfig, ResourceSpec
from .ir import IREnum, IRResource
from .store import ResourceStore

logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]


def normalize_page(result: Any, pagination: PaginationConfig) -> dict[str, Any]:
    """Fill in the Connection fields a store left out.

    Raises:
        TypeError: if the store did not return a mapping.
    """
    if not isinstance(result, Mapping):
        raise TypeError(f"Store returned {type(result).__name__}, expected a page mapping")

    def value_or(key: str, default: Any) -> Any:
        value = result.get(key)
        return default if value is None else value

    return {
        "items": list(value_or("items", [])),
        "total": value_or("total", 0),
        "limit": value_or("limit", pagination.limit_default),
        "offset": value_or("offset", pagination.offset_default),
        "hasNext": value_or("hasNext", False),
    }


def make_key_resolver(source_name: str) -> Resolver:
    """Resolver reading the raw property name of a renamed field."""

    def resolve_key(source: Any, _info: Any) -> Any:
        if isinstance(source, Mapping):
            return source.get(source_name)
        return getattr(source, source_name, None)

    return resolve_key


def make_enum_resolver(source_name: str, ir_enum: IREnum) -> Resolver:
    """Resolver mapping alias raw values onto the raw value of their enum name.

    ``"in-progress"`` and ``"in_progress"`` share the name ``in_progress``;
    records may hold either, so both serialize.
    """
    primary = {value.name: value.value for value in ir_enum.values}
    translations = [(alias.value, primary[alias.name]) for alias in ir_enum.aliases]
    read = make_key_resolver(source_name)

    def translate(value: Any) -> Any:
        for raw, canonical in translations:
            # type check keeps True apart from 1
            if type(value) is type(raw) and value == raw:
                return canonical
        return value

    def resolve_enum(source: Any, info: Any) -> Any:
        value = read(source, info)
        if isinstance(value, list):
            return [translate(item) for item in value]
        return translate(value)

    return resolve_enum


class ResolverBinder:
    """Build the resolver map for a compiled schema.

    Example:
        compiled = SchemaCompiler().compile(specs)
        resolvers = ResolverBinder(specs, compiled, store).build()
        resolvers["Query"]["persons"]  # list resolver
    """

    def __init__(
        self,
        specs: Sequence[ResourceSpec],
        compiled: CompiledSchema,
        store: ResourceStore,
    ):
        """Initialize the binder.

        Args:
            specs: The resource specs the schema was compiled from
            compiled: Output of SchemaCompiler.compile
            store: Backend answering the queries
        """
        self.compiled = compiled
        self.store = store
        self._pagination = {spec.name: spec.pagination_defaults for spec in specs}

    def pagination_for(self, resource_name: str) -> PaginationConfig:
        return self._pagination.get(resource_name, DEFAULT_PAGINATION)

    def build(self) -> dict[str, dict[str, Resolver]]:
        """Return ``{"Query": {...}, "<Type>": {...}}`` keyed by SDL field names."""
        query: dict[str, Resolver] = {}
        for resource in self.compiled.resources:
            query[resource.list_field] = self._create_list_resolver(resource)
            query[resource.single_field] = self._create_single_resolver(resource)
        query["search"] = self._create_search_resolver()

        resolvers: dict[str, dict[str, Resolver]] = {"Query": query}
        enums = self.compiled.ir.enums
        for ir_type in self.compiled.ir.types.values():
            fields: dict[str, Resolver] = {}
            for field in ir_type.fields:
                ir_enum = enums.get(field.type_name)
                if ir_enum is not None and ir_enum.aliases:
                    fields[field.name] = make_enum_resolver(field.source_name or field.name, ir_enum)
                elif field.is_renamed:
                    fields[field.name] = make_key_resolver(field.source_name)
            if fields:
                resolvers[ir_type.name] = fields
        return resolvers

    def _create_list_resolver(self, resource: IRResource) -> Resolver:
        """Create a resolver for a paginated, searchable list."""
        store = self.store
        name = resource.name
        searchable_fields = list(resource.searchable_fields)
        pagination = self.pagination_for(name)

        def resolve_list(
            _source: Any,
            _info: Any,
            search: str | None = None,
            limit: int | None = None,
            offset: int | None = None,
            **filters: Any,
        ) -> dict[str, Any]:
            query_params: dict[str, Any] = {}
            # Without searchable fields a search term would match nothing
            if search and searchable_fields:
                query_params["search"] = search
            query_params["limit"] = limit
            query_params["offset"] = offset
            query_params.update({k: v for k, v in filters.items() if v is not None})

            db = store.get_database(name)
            result = store.execute_search(db, query_params, searchable_fields, pagination)
            return normalize_page(result, pagination)

        return resolve_list

    def _create_single_resolver(self, resource: IRResource) -> Resolver:
        """Create a resolver for getting a single record by ID."""
        store = self.store
        name = resource.name

        def resolve_single(_source: Any, _info: Any, id: str) -> Any | None:
            return store.find_by_id(name, id)

        return resolve_single

    def _create_search_resolver(self) -> Resolver:
        """Create the cross-resource search resolver.

        Each resource returns its own top ``limit`` matches starting at 0;
        ``totalCount`` adds up the totals the store reports per resource.
        """
        store = self.store
        resources = list(self.compiled.resources)
        pagination = {r.name: self.pagination_for(r.name) for r in resources}

        def resolve_search(
            _source: Any,
            _info: Any,
            query: str,
            limit: int | None = None,
            offset: int | None = None,
        ) -> dict[str, Any]:
            results: dict[str, Any] = {}
            total_count = 0
            for resource in resources:
                if not resource.searchable_fields:
                    results[resource.list_field] = []
                    continue

                db = store.get_database(resource.name)
                query_params = {"search": query, "limit": limit, "offset": 0}
                page = normalize_page(
                    store.execute_search(db, query_params, list(resource.searchable_fields), pagination[resource.name]),
                    pagination[resource.name],
                )
                results[resource.list_field] = page["items"]
                total_count += page["total"]

            results["totalCount"] = total_count
            return results

        return resolve_search
