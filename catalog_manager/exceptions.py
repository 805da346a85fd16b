"""Catalog exceptions.

All errors raised by the catalog manager derive from CatalogError so the
presentation layer can catch them in one place. Remote failures derive
from APIError; local form validation failures raise ValidationError and
never reach the server.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog manager exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Local Errors
# ============================================================================


class ValidationError(CatalogError):
    """Raised when a product draft fails local validation.

    Attributes:
        field_errors: Mapping of field name to human-readable message.
    """

    def __init__(self, field_errors: dict[str, str]) -> None:
        """Initialize validation error.

        Args:
            field_errors: Mapping of field name to error message.
        """
        fields = ", ".join(sorted(field_errors))
        super().__init__(
            f"Invalid product data: {fields}",
            details={"field_errors": dict(field_errors)},
        )
        self.field_errors = dict(field_errors)


class CacheStateError(CatalogError):
    """Raised when a cache entry is moved through an invalid transition."""

    def __init__(self, query_key: tuple[str, ...], current: str, target: str) -> None:
        """Initialize cache state error.

        Args:
            query_key: Key of the cache entry.
            current: Current status of the entry.
            target: Attempted target status.
        """
        super().__init__(
            f"Cannot transition query {query_key!r} from '{current}' to '{target}'",
            details={
                "query_key": list(query_key),
                "current_state": current,
                "target_state": target,
            },
        )


# ============================================================================
# Remote API Errors
# ============================================================================


class APIError(CatalogError):
    """Base class for failures talking to the catalog API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code, if a response was received.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message, details=details)
        self.status_code = status_code


class NetworkError(APIError):
    """Raised when no response was received (connection failure, timeout)."""

    def __init__(self, method: str, path: str, reason: str) -> None:
        super().__init__(
            f"{method} {path} failed: {reason}",
            details={"method": method, "path": path},
        )


class HttpError(APIError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        body: Any = None,
    ) -> None:
        """Initialize HTTP error.

        Args:
            method: HTTP method of the failed request.
            path: Request path relative to the API base URL.
            status_code: Response status code.
            body: Decoded response body, if any.
        """
        super().__init__(
            f"{method} {path} returned HTTP {status_code}",
            status_code=status_code,
            details={"method": method, "path": path, "body": body},
        )


class NotFoundError(HttpError):
    """Raised when the product does not exist (HTTP 404)."""

    pass


class RemoteValidationError(HttpError):
    """Raised when the API rejects the payload (HTTP 4xx other than 404).

    Attributes:
        field_errors: Field name to message mapping extracted from the body.
    """

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        body: Any = None,
        field_errors: dict[str, str] | None = None,
    ) -> None:
        super().__init__(method, path, status_code, body)
        self.field_errors = field_errors or {}


class ServerError(HttpError):
    """Raised when the API fails internally (HTTP 5xx)."""

    pass
