"""Pytest fixtures and configuration."""

import json

import httpx
import pytest

from budgetly.api.transport import Transport
from budgetly.data.device_storage import DeviceStorage
from budgetly.data.local_cache import LocalCache
from budgetly.data.secure_store import CredentialStore, SecureStore
from budgetly.domain.models import Account, Credentials, TransactionGroup
from budgetly.state.store import Store


@pytest.fixture
def credentials():
    return Credentials(endpoint_url="https://firefly.example.com", access_token="test-token")


@pytest.fixture
def make_account_data():
    """Factory fixture for raw account records as the server returns them."""

    def _make(id="1", name="Checking", **attributes):
        defaults = {
            "name": name,
            "type": "asset",
            "current_balance": "100.00",
            "currency_code": "EUR",
            "active": True,
        }
        defaults.update(attributes)
        return {"id": str(id), "type": "accounts", "attributes": defaults}

    return _make


@pytest.fixture
def make_account(make_account_data):
    """Factory fixture for validated accounts."""

    def _make(id="1", name="Checking", **attributes):
        return Account.model_validate(make_account_data(id, name, **attributes))

    return _make


@pytest.fixture
def make_transaction_data():
    """Factory fixture for raw transaction-group records."""

    def _make(id="1", description="Groceries", amount="12.50", **split):
        defaults = {
            "type": "withdrawal",
            "date": "2024-03-01T00:00:00+00:00",
            "amount": amount,
            "description": description,
            "source_name": "Checking",
            "destination_name": "Supermarket",
        }
        defaults.update(split)
        return {
            "id": str(id),
            "type": "transactions",
            "attributes": {"group_title": None, "transactions": [defaults]},
        }

    return _make


@pytest.fixture
def make_transaction(make_transaction_data):
    def _make(id="1", description="Groceries", amount="12.50", **split):
        return TransactionGroup.model_validate(
            make_transaction_data(id, description, amount, **split)
        )

    return _make


@pytest.fixture
def make_envelope():
    """Factory fixture for list envelopes with optional pagination."""

    def _make(data, page=1, total_pages=None, included=None):
        envelope = {"data": data}
        if total_pages is not None:
            envelope["meta"] = {
                "pagination": {
                    "total": len(data) * total_pages,
                    "count": len(data),
                    "per_page": len(data),
                    "current_page": page,
                    "total_pages": total_pages,
                }
            }
        if included is not None:
            envelope["included"] = included
        return envelope

    return _make


@pytest.fixture
def json_response():
    """Build an httpx response with a JSON body."""

    def _make(status_code=200, body=None):
        return httpx.Response(status_code, content=json.dumps(body).encode(), headers={
            "Content-Type": "application/json",
        })

    return _make


@pytest.fixture
async def make_transport(credentials):
    """Factory for transports whose requests are answered by a handler."""
    transports = []

    def _make(handler, creds=None, timeout=30.0):
        transport = Transport(
            creds or credentials, timeout=timeout, http_transport=httpx.MockTransport(handler)
        )
        transports.append(transport)
        return transport

    yield _make
    for transport in transports:
        await transport.aclose()


@pytest.fixture
async def storage(tmp_path):
    """Initialized device storage in a temporary directory."""
    storage = DeviceStorage(tmp_path / "storage.db")
    await storage.initialize()
    yield storage
    await storage.close()


@pytest.fixture
def cache(storage):
    return LocalCache(storage)


@pytest.fixture
def secure_store(tmp_path):
    return SecureStore(tmp_path / "secure" / "credentials.enc", tmp_path / "secure" / "credentials.key")


@pytest.fixture
def credential_store(secure_store):
    return CredentialStore(secure_store)


@pytest.fixture
def store(credential_store, cache):
    return Store(credential_store, cache)
