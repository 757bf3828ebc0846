"""Resource store backed by the REST API the schemas describe.

Handles HTTP communication and maps the REST surface onto the
``ResourceStore`` protocol:

    GET /{resource}/{id}                          -> find_by_id
    GET /{resource}?search=&limit=&offset=&...    -> execute_search
"""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from .config import PaginationConfig
from .errors import StoreError

logger = logging.getLogger(__name__)


class HttpResourceStore:
    """Queries a REST backend synchronously with httpx.

    Examples:
        with HttpResourceStore("http://localhost:1080") as store:
            person = store.find_by_id("persons", "p-1")

        # Custom client (e.g. for tests with httpx.MockTransport)
        store = HttpResourceStore("http://api", client=httpx.Client(transport=transport))
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the store.

        Args:
            base_url: Root URL of the REST API
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds
            client: Pre-configured client; base_url, headers and timeout
                    are applied only when the store creates its own client
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self.base_url,
            headers={"Accept": "application/json", **(headers or {})},
            timeout=timeout,
        )

    def close(self):
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpResourceStore":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(str(segment), safe="") for segment in segments)
        return f"{self.base_url}/{path}"

    def find_by_id(self, resource: str, id: str) -> dict[str, Any] | None:
        try:
            response = self._client.get(self._url(resource, id))
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to fetch {resource}/{id}: {e}", resource) from e
        return response.json()

    def get_database(self, resource: str) -> str:
        # The handle is the collection path
        return resource

    def execute_search(
        self,
        handle: str,
        query_params: Mapping[str, Any],
        searchable_fields: list[str],
        pagination: PaginationConfig,
    ) -> dict[str, Any]:
        params = self._serialize_params(query_params, pagination)
        try:
            response = self._client.get(self._url(handle), params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to search {handle}: {e}", handle) from e
        logger.debug("GET %s %r -> %d", handle, params, response.status_code)
        return response.json()

    @staticmethod
    def _serialize_params(query_params: Mapping[str, Any], pagination: PaginationConfig) -> dict[str, Any]:
        """Drop unset values and keep the limit within the resource maximum."""
        result = {}
        for key, value in query_params.items():
            if value is None:
                continue  # Let the backend apply its defaults
            if isinstance(value, bool):
                value = "true" if value else "false"
            result[key] = value
        if "limit" in result:
            result["limit"] = min(int(result["limit"]), pagination.limit_max)
        return result
