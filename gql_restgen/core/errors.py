"""Exceptions and error codes used across the compiler and the service."""

INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
GRAPHQL_PARSE_FAILED = "GRAPHQL_PARSE_FAILED"
GRAPHQL_VALIDATION_FAILED = "GRAPHQL_VALIDATION_FAILED"
BAD_USER_INPUT = "BAD_USER_INPUT"
BAD_REQUEST = "BAD_REQUEST"


class SchemaCompilationError(Exception):
    """Base exception for failures that stop a compilation run."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TypeNameCollisionError(SchemaCompilationError):
    """Raised when two different schema nodes synthesize the same type name.

    Type names are derived from property paths (``{Parent}{Field}``), so
    ``Person.address.line`` and ``Person.addressLine`` both produce
    ``PersonAddressLine``. Reusing the first definition would silently give
    one of the fields the wrong shape.
    """

    def __init__(self, name: str, existing_kind: str, requested_kind: str):
        self.name = name
        self.existing_kind = existing_kind
        self.requested_kind = requested_kind
        if existing_kind == requested_kind:
            message = f"Generated {requested_kind} name '{name}' is produced by two different schemas"
        else:
            message = (
                f"Generated name '{name}' is already used by a {existing_kind}, "
                f"cannot reuse it for a {requested_kind}"
            )
        super().__init__(message)


class StoreError(Exception):
    """Raised by remote resource stores when the backend cannot be reached."""

    def __init__(self, message: str, resource: str | None = None):
        self.message = message
        self.resource = resource
        super().__init__(message)
