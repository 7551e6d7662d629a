"""
Customer API — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for every failure a CRUD request can hit.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status.
Who:   Raised by the identifier codec, resource schemas, the repository and
       the security dependency; caught by the global handlers.

Exception Hierarchy:
    CustomerApiError (base)
    ├── ValidationError              → 400 Bad Request (field-level errors)
    │   └── InvalidIdentifierError   → 400 Bad Request (malformed id in URL)
    ├── NotFoundError                → 404 Not Found
    ├── AuthenticationError          → 401 Unauthorized
    └── StoreUnavailableError        → 500 Internal Server Error

Repository outcomes are expressed with these exceptions rather than result
objects: a successful call returns the resource, every other outcome raises.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError


class CustomerApiError(Exception):
    """
    Base exception for all Customer API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CustomerApiError):
    """
    Raised when client input fails validation.

    What:    The client sent data that can be corrected.
    When:    Missing required field on create, wrong field type, null for a
             non-nullable field on update.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Request payload failed validation",
            "details": {"errors": [{"field": "name", "message": "Field required", "type": "missing"}]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []

    @classmethod
    def from_pydantic(
        cls,
        exc: PydanticValidationError,
        message: str = "Request payload failed validation",
    ) -> "ValidationError":
        """Converts a pydantic ValidationError into a field-level error list."""
        return cls(message=message, errors=field_errors(exc.errors()))


class InvalidIdentifierError(ValidationError):
    """
    Raised when an external identifier is not in canonical form.

    When:    GET/PUT/PATCH/DELETE /api/customers/{id} with a malformed id.
    HTTP:    400 Bad Request (the repository is never called)
    """

    def __init__(self, value: Any = None):
        super().__init__(
            message=f"'{value}' is not a valid resource identifier",
            field="id",
            errors=[{
                "field": "id",
                "message": "Expected a lowercase canonical UUID (8-4-4-4-12 hex digits)",
                "type": "invalid_identifier",
            }],
        )
        self.value = value


class NotFoundError(CustomerApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/PATCH/DELETE with a well-formed id that matches no row.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class AuthenticationError(CustomerApiError):
    """
    Raised when an API key is configured and the request doesn't carry it.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "A valid X-API-Key header is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(CustomerApiError):
    """
    Raised when the database driver fails during a repository operation.

    What:    Connection refused or lost, pool checkout timed out, statement or
             encoding fault inside the driver.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver details
        go into `context` and are logged server-side only.

    The repository never retries; retry policy belongs to the caller.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def field_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic/FastAPI error dicts into `{field, message, type}` entries.

    FastAPI prefixes locations with the request part ("body", "path", ...);
    that prefix is dropped so clients see plain field names.
    """
    flattened = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in {"body", "path", "query", "header"}:
            loc = loc[1:]
        flattened.append({
            "field": ".".join(loc) or "__root__",
            "message": str(error.get("msg", "Invalid value")),
            "type": str(error.get("type", "value_error")),
        })
    return flattened
