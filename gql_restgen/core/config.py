"""Input models and service configuration.

Resource specs arrive as plain dictionaries from the OpenAPI loader (or a
JSON file for the CLI); they are validated once into immutable pydantic
models.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaginationConfig(BaseModel):
    """Per-resource pagination defaults.

    Accepts both ``limitDefault`` (as written in the API specs) and
    ``limit_default``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    limit_default: int = Field(25, alias="limitDefault", ge=1)
    limit_max: int = Field(100, alias="limitMax", ge=1)
    offset_default: int = Field(0, alias="offsetDefault", ge=0)


DEFAULT_PAGINATION = PaginationConfig()


class ResourceSpec(BaseModel):
    """One REST resource: its plural name and its named schemas.

    Example:
        spec = ResourceSpec(
            name="persons",
            schemas={"Person": {"type": "object", "properties": {...}}},
            pagination={"limitDefault": 10},
        )
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    schemas: dict[str, Any] = Field(default_factory=dict)
    pagination: PaginationConfig | None = None

    @property
    def pagination_defaults(self) -> PaginationConfig:
        """The resource's pagination, or the global fallback."""
        return self.pagination or DEFAULT_PAGINATION


class ServiceConfig(BaseModel):
    """Options of the assembled GraphQL service."""

    model_config = ConfigDict(frozen=True)

    introspection: bool = True
    # Replace messages of internal errors with a generic text for clients
    mask_internal_errors: bool = False
    search_depth: int = Field(4, ge=1)


def load_resource_specs(path: str | Path) -> list[ResourceSpec]:
    """Load resource specs from a JSON file.

    The document is either a list of specs or an object with a
    ``resources`` list.
    """
    with open(path) as f:
        document = json.load(f)
    if isinstance(document, dict):
        document = document.get("resources", [])
    return [ResourceSpec.model_validate(item) for item in document]
