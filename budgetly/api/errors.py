"""Error taxonomy for the remote API.

Every failure of a request made through a ``Transport`` is normalized into
one of the classes below, whatever resource was requested. Request functions
and the pagination aggregator re-raise these unchanged.
"""

from typing import Any, Optional


class ApiError(Exception):
    """Base class for all normalized API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotInitializedError(ApiError):
    """The client was used before credentials were set.

    Raised locally; no request is ever sent.
    """

    def __init__(self, message: str = "API client not initialized. Please set credentials first."):
        super().__init__(message)


class UnauthorizedError(ApiError):
    """HTTP 401: the access token is missing, invalid or expired."""


class ForbiddenError(ApiError):
    """HTTP 403."""


class NotFoundError(ApiError):
    """HTTP 404."""


class ValidationFailedError(ApiError):
    """HTTP 422: the server rejected the submitted data.

    ``payload`` is the server's response body, unmodified, so that forms can
    show field-level messages (``payload["errors"][field]``).
    """

    def __init__(self, message: str, payload: Any):
        super().__init__(message, status_code=422)
        self.payload = payload

    @property
    def field_errors(self) -> dict[str, list[str]]:
        """Field name to messages, or an empty dict if the body has none."""
        if isinstance(self.payload, dict) and isinstance(self.payload.get("errors"), dict):
            return self.payload["errors"]
        return {}


class RateLimitedError(ApiError):
    """HTTP 429."""


class ServerError(ApiError):
    """HTTP 500."""


class UnknownStatusError(ApiError):
    """Any other 4xx/5xx status."""


class UnreachableError(ApiError):
    """The request was sent but no response arrived (DNS, timeout, offline)."""


class ClientFaultError(ApiError):
    """The request failed before it could be sent (e.g. serialization)."""


class ResponseFormatError(ApiError):
    """A successful response whose body did not match the expected shape."""


def error_for_status(status_code: int, body: Any) -> ApiError:
    """Build the normalized error for an HTTP error response.

    Args:
        status_code: HTTP status code (>= 400)
        body: Decoded JSON body, or None if the body was not JSON

    Returns:
        ApiError subclass instance matching the status
    """
    server_message = body.get("message") if isinstance(body, dict) else None

    if status_code == 401:
        return UnauthorizedError(
            "Invalid credentials. Please check your Personal Access Token.", status_code
        )
    if status_code == 403:
        return ForbiddenError(
            "Access forbidden. You do not have permission to access this resource.",
            status_code,
        )
    if status_code == 404:
        return NotFoundError("Resource not found.", status_code)
    if status_code == 422:
        return ValidationFailedError(
            server_message or "Validation error. Please check your input.", body
        )
    if status_code == 429:
        return RateLimitedError(
            "Too many requests. Please wait a moment and try again.", status_code
        )
    if status_code == 500:
        return ServerError(
            server_message or "Server error. Please try again later.", status_code
        )
    return UnknownStatusError(
        server_message or f"Request failed with status {status_code}", status_code
    )
