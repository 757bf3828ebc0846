"""Resource store interface consumed by the resolvers.

The persistence and search engine lives outside this package; resolvers only
talk to it through the ``ResourceStore`` protocol. ``InMemoryResourceStore``
is a small reference implementation used by the CLI and the tests.

Example usage:
    store = InMemoryResourceStore({"persons": [{"id": "p-1", "name": {"firstName": "Ada"}}]})
    db = store.get_database("persons")
    page = store.execute_search(db, {"search": "ada"}, ["name.firstName"], PaginationConfig())
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from .config import PaginationConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceStore(Protocol):
    """Protocol for the backend answering resolver calls.

    ``execute_search`` returns a page mapping with ``items``, ``total``,
    ``limit``, ``offset`` and ``hasNext``. Missing keys are tolerated; the
    resolvers fill in defaults.
    """

    def find_by_id(self, resource: str, id: str) -> Mapping[str, Any] | None:
        """Return one record, or None when it does not exist."""
        ...

    def get_database(self, resource: str) -> Any:
        """Return the handle ``execute_search`` operates on."""
        ...

    def execute_search(
        self,
        handle: Any,
        query_params: Mapping[str, Any],
        searchable_fields: list[str],
        pagination: PaginationConfig,
    ) -> Mapping[str, Any]:
        """Run a search/filter query and return one page of results."""
        ...


def get_path(record: Mapping[str, Any], path: str) -> Any:
    """Read a dot-path such as ``name.firstName`` from a nested record."""
    value: Any = record
    for segment in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(segment)
    return value


def parse_pagination(query_params: Mapping[str, Any], pagination: PaginationConfig) -> tuple[int, int]:
    """Apply defaults and bounds to the requested limit and offset."""
    limit = query_params.get("limit")
    offset = query_params.get("offset")
    limit = pagination.limit_default if limit is None else int(limit)
    offset = pagination.offset_default if offset is None else int(offset)
    return max(1, min(limit, pagination.limit_max)), max(0, offset)


class InMemoryResourceStore:
    """Keeps records per resource in plain lists.

    Search is a case-insensitive substring match over the searchable paths;
    every other query parameter is an equality filter on a top-level key.
    """

    def __init__(self, records: Mapping[str, Iterable[Mapping[str, Any]]] | None = None, id_field: str = "id"):
        self.id_field = id_field
        self._records: dict[str, list[dict[str, Any]]] = {}
        for resource, items in (records or {}).items():
            for item in items:
                self.add(resource, item)

    def add(self, resource: str, record: Mapping[str, Any]):
        """Insert a record into a resource collection."""
        self._records.setdefault(resource, []).append(dict(record))

    def find_by_id(self, resource: str, id: str) -> dict[str, Any] | None:
        for record in self._records.get(resource, []):
            if str(record.get(self.id_field)) == str(id):
                return record
        return None

    def get_database(self, resource: str) -> list[dict[str, Any]]:
        # A snapshot, so concurrent resolvers never see a list being mutated
        return list(self._records.get(resource, []))

    def execute_search(
        self,
        handle: list[dict[str, Any]],
        query_params: Mapping[str, Any],
        searchable_fields: list[str],
        pagination: PaginationConfig,
    ) -> dict[str, Any]:
        params = dict(query_params)
        term = params.pop("search", None)
        limit, offset = parse_pagination(params, pagination)
        params.pop("limit", None)
        params.pop("offset", None)
        filters = {key: value for key, value in params.items() if value is not None}

        matches = [
            record for record in handle
            if self._matches_filters(record, filters) and self._matches_search(record, term, searchable_fields)
        ]
        total = len(matches)
        items = matches[offset:offset + limit]
        logger.debug("Search %r with filters %r matched %d records", term, filters, total)
        return {
            "items": items,
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasNext": offset + len(items) < total,
        }

    @staticmethod
    def _matches_filters(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
        return all(record.get(key) == value for key, value in filters.items())

    @staticmethod
    def _matches_search(record: Mapping[str, Any], term: str | None, searchable_fields: list[str]) -> bool:
        if not term:
            return True
        needle = term.lower()
        for path in searchable_fields:
            value = get_path(record, path)
            if isinstance(value, str) and needle in value.lower():
                return True
        return False
