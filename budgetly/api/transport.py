"""HTTP transport bound to one set of credentials.

A ``Transport`` owns a single ``httpx.AsyncClient`` configured with the base
URL, bearer token, JSON headers and a fixed timeout. All requests pass
through ``Transport.request``, which maps every failure into the taxonomy in
``budgetly.api.errors``.
"""

import logging
from functools import lru_cache
from typing import Any, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from budgetly.api.errors import (
    ClientFaultError,
    ResponseFormatError,
    UnreachableError,
    error_for_status,
)
from budgetly.domain.models import Credentials

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0

UNREACHABLE_MESSAGE = (
    "Cannot connect to Firefly III. Please check your instance URL and network connection."
)


class Transport:
    """Credentialed HTTP client for the ``/api/v1/`` endpoints.

    Example:
        >>> transport = Transport(credentials)
        >>> body = await transport.request("GET", "accounts", params={"page": 1})
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize transport.

        Args:
            credentials: Endpoint URL and access token
            timeout: Request timeout in seconds, applied to every request
            http_transport: Optional httpx transport (used by tests)
        """
        self._base_url = credentials.api_base_url
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {credentials.access_token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            follow_redirects=True,
            transport=http_transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to ``api/v1/``
            params: Query parameters; entries whose value is None are dropped
            json: Optional JSON request body

        Returns:
            Decoded JSON body, or None for empty responses (e.g. 204)

        Raises:
            ApiError: Normalized failure (see ``budgetly.api.errors``)
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}

        try:
            request = self._http.build_request(method, path, params=query, json=json)
        except (TypeError, ValueError, httpx.InvalidURL) as e:
            raise ClientFaultError(f"Could not build request: {e}") from e

        try:
            response = await self._http.send(request)
        except (httpx.LocalProtocolError, httpx.UnsupportedProtocol) as e:
            raise ClientFaultError(str(e) or "An unexpected error occurred.") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} got no response: {e!r}")
            raise UnreachableError(UNREACHABLE_MESSAGE) from e

        if response.is_error:
            error = error_for_status(response.status_code, _decode_body(response))
            logger.debug(f"{method} {path} failed with {response.status_code}")
            raise error

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(
                f"Server returned a non-JSON response for {path}", response.status_code
            ) from e

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path)


def _decode_body(response: httpx.Response) -> Any:
    """Decode an error body as JSON, or None if it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def parse_response(type_: type[T], body: Any) -> T:
    """Validate a decoded response body into a model type.

    Args:
        type_: Target type, e.g. ``Envelope[list[Account]]``
        body: Decoded JSON body

    Returns:
        Validated instance of ``type_``

    Raises:
        ResponseFormatError: If the body does not match the expected shape
    """
    try:
        return _adapter(type_).validate_python(body)
    except ValidationError as e:
        raise ResponseFormatError(f"Unexpected response shape: {e.error_count()} error(s)") from e
