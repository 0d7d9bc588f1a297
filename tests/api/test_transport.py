"""Tests for the HTTP transport and error normalization."""

import json

import httpx
import pytest

from budgetly.api.errors import (
    ClientFaultError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ResponseFormatError,
    ServerError,
    UnauthorizedError,
    UnknownStatusError,
    UnreachableError,
    ValidationFailedError,
    error_for_status,
)
from budgetly.api.transport import UNREACHABLE_MESSAGE, parse_response
from budgetly.domain.models import Account, Credentials, Envelope


class TestRequestShape:
    """Tests for what the transport puts on the wire."""

    @pytest.mark.asyncio
    async def test_base_url_and_headers(self, make_transport, json_response):
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"data": []})

        transport = make_transport(handler)
        await transport.get("accounts", params={"page": 1})

        request = seen[0]
        assert str(request.url) == "https://firefly.example.com/api/v1/accounts?page=1"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_trailing_slash_not_doubled(self, make_transport, json_response):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return json_response(200, {"data": []})

        creds = Credentials(endpoint_url="https://firefly.example.com/", access_token="t")
        transport = make_transport(handler, creds=creds)
        await transport.get("accounts")

        assert seen == ["https://firefly.example.com/api/v1/accounts"]

    @pytest.mark.asyncio
    async def test_none_params_are_omitted(self, make_transport, json_response):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return json_response(200, {"data": []})

        transport = make_transport(handler)
        await transport.get("transactions", params={"page": 2, "start": None, "end": "2024-01-31"})

        assert seen == [{"page": "2", "end": "2024-01-31"}]

    @pytest.mark.asyncio
    async def test_json_body_sent(self, make_transport, json_response):
        seen = []

        def handler(request):
            seen.append(request.content)
            return json_response(200, {"data": {}})

        transport = make_transport(handler)
        await transport.post("budgets", json={"name": "Food"})

        assert json.loads(seen[0]) == {"name": "Food"}

    @pytest.mark.asyncio
    async def test_empty_response_returns_none(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(204))
        assert await transport.delete("accounts/1") is None

    @pytest.mark.asyncio
    async def test_redirect_followed(self, make_transport, json_response):
        """A proxy redirect is followed to the real body, keeping the token."""
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path == "/api/v1/accounts":
                return httpx.Response(301, headers={
                    "Location": "https://firefly.example.com/api/v1/accounts/",
                })
            return json_response(200, {"data": [{"id": "1"}]})

        transport = make_transport(handler)
        body = await transport.get("accounts")

        assert body == {"data": [{"id": "1"}]}
        assert len(seen) == 2
        assert seen[1].headers["Authorization"] == "Bearer test-token"


class TestErrorMapping:
    """Each HTTP error status maps to exactly one error kind."""

    @pytest.mark.parametrize("status,error_type", [
        (401, UnauthorizedError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (422, ValidationFailedError),
        (429, RateLimitedError),
        (500, ServerError),
        (418, UnknownStatusError),
        (503, UnknownStatusError),
    ])
    @pytest.mark.asyncio
    async def test_status_maps_to_error(self, make_transport, json_response, status, error_type):
        transport = make_transport(lambda request: json_response(status, {"message": "nope"}))

        with pytest.raises(error_type) as exc_info:
            await transport.get("accounts")

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_unauthorized_message(self, make_transport, json_response):
        transport = make_transport(lambda request: json_response(401, {"message": "Unauthenticated."}))

        with pytest.raises(UnauthorizedError) as exc_info:
            await transport.get("about")

        assert "Personal Access Token" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_validation_payload_preserved(self, make_transport, json_response):
        body = {
            "message": "The given data was invalid.",
            "errors": {"name": ["The name field is required."]},
        }
        transport = make_transport(lambda request: json_response(422, body))

        with pytest.raises(ValidationFailedError) as exc_info:
            await transport.post("accounts", json={})

        error = exc_info.value
        assert error.payload == body
        assert error.message == "The given data was invalid."
        assert error.field_errors == {"name": ["The name field is required."]}

    @pytest.mark.asyncio
    async def test_server_message_used_for_500(self, make_transport, json_response):
        transport = make_transport(lambda request: json_response(500, {"message": "Database down"}))

        with pytest.raises(ServerError, match="Database down"):
            await transport.get("accounts")

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(502, content=b"<html>Bad gateway</html>"))

        with pytest.raises(UnknownStatusError, match="Request failed with status 502"):
            await transport.get("accounts")

    def test_fallback_messages(self):
        assert error_for_status(422, None).message == "Validation error. Please check your input."
        assert error_for_status(500, None).message == "Server error. Please try again later."
        assert error_for_status(404, {"message": "ignored"}).message == "Resource not found."


class TestTransportFailures:
    """Failures where no HTTP response is available."""

    @pytest.mark.asyncio
    async def test_timeout_is_unreachable(self, make_transport):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = make_transport(handler)

        with pytest.raises(UnreachableError) as exc_info:
            await transport.get("accounts")

        assert exc_info.value.message == UNREACHABLE_MESSAGE
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_connect_error_is_unreachable(self, make_transport):
        def handler(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        transport = make_transport(handler)

        with pytest.raises(UnreachableError):
            await transport.get("accounts")

    @pytest.mark.asyncio
    async def test_unserializable_body_is_client_fault(self, make_transport, json_response):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(200, {})

        transport = make_transport(handler)

        with pytest.raises(ClientFaultError):
            await transport.post("transactions", json={"when": object()})

        assert calls == []

    @pytest.mark.asyncio
    async def test_invalid_json_success_body(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, content=b"not json"))

        with pytest.raises(ResponseFormatError):
            await transport.get("accounts")


class TestParseResponse:
    """Tests for validating bodies into models."""

    def test_valid_body(self, make_account_data):
        envelope = parse_response(Envelope[list[Account]], {"data": [make_account_data()]})
        assert envelope.data[0].attributes.name == "Checking"

    def test_unknown_fields_ignored(self, make_account_data):
        record = make_account_data(new_server_field="x")
        envelope = parse_response(Envelope[list[Account]], {"data": [record], "extra": 1})
        assert envelope.data[0].id == "1"

    def test_wrong_shape_raises(self):
        with pytest.raises(ResponseFormatError):
            parse_response(Envelope[list[Account]], {"data": [{"id": "1"}]})
