"""Encrypted-at-rest storage for credentials.

Values are encrypted with a Fernet key kept in its own file next to the
encrypted store, both created with owner-only permissions. The encrypted
store is separate from device storage, so a copy of device storage alone
never exposes the access token.

Errors (I/O, corrupted key, tampered data) are not absorbed here: callers
must not assume a value was saved if a call raised.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet

from budgetly.domain.models import Credentials

logger = logging.getLogger(__name__)

CREDENTIALS_KEY = "firefly_credentials"

_FILE_MODE = 0o600


class SecureStore:
    """Small encrypted key/value store.

    Example:
        >>> store = SecureStore(tmp_path / "secure.enc", tmp_path / "secure.key")
        >>> await store.set_item("token", "abc")
        >>> await store.get_item("token")
        'abc'
    """

    def __init__(self, store_path: Path, key_path: Path):
        """Initialize secure store.

        Args:
            store_path: File holding the encrypted values
            key_path: File holding the Fernet key (created on first write)
        """
        self._store_path = store_path
        self._key_path = key_path

    @property
    def store_path(self) -> Path:
        return self._store_path

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_item_sync, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_item_sync, key, value)

    async def delete_item(self, key: str) -> None:
        await asyncio.to_thread(self._delete_item_sync, key)

    # Synchronous implementations (run in a worker thread)

    def _get_item_sync(self, key: str) -> Optional[str]:
        if not self._key_path.exists():
            return None
        token = self._read_entries().get(key)
        if token is None:
            return None
        return self._fernet(create=False).decrypt(token.encode("ascii")).decode("utf-8")

    def _set_item_sync(self, key: str, value: str) -> None:
        fernet = self._fernet(create=True)
        entries = self._read_entries()
        entries[key] = fernet.encrypt(value.encode("utf-8")).decode("ascii")
        self._write_private(self._store_path, json.dumps(entries).encode("utf-8"))

    def _delete_item_sync(self, key: str) -> None:
        entries = self._read_entries()
        if entries.pop(key, None) is not None:
            self._write_private(self._store_path, json.dumps(entries).encode("utf-8"))

    def _read_entries(self) -> dict[str, str]:
        if not self._store_path.exists():
            return {}
        return json.loads(self._store_path.read_text(encoding="utf-8"))

    def _fernet(self, create: bool) -> Fernet:
        """Load the Fernet key, generating and storing it if allowed."""
        if self._key_path.exists():
            return Fernet(self._key_path.read_bytes())
        if not create:
            raise FileNotFoundError(f"Secure store key missing: {self._key_path}")
        key = Fernet.generate_key()
        self._write_private(self._key_path, key)
        logger.info("New secure store key generated")
        return Fernet(key)

    @staticmethod
    def _write_private(path: Path, data: bytes) -> None:
        """Atomically write a file readable only by the owner."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)


class CredentialStore:
    """Persists the one ``Credentials`` record in the secure store."""

    def __init__(self, secure_store: SecureStore):
        self._secure = secure_store

    async def save(self, credentials: Credentials) -> None:
        await self._secure.set_item(
            CREDENTIALS_KEY, credentials.model_dump_json(by_alias=True)
        )

    async def load(self) -> Optional[Credentials]:
        """Load stored credentials.

        Returns:
            Credentials, or None if none are stored

        Raises:
            Exception: If the store cannot be read or the record is invalid
        """
        stored = await self._secure.get_item(CREDENTIALS_KEY)
        if stored is None:
            return None
        return Credentials.model_validate_json(stored)

    async def clear(self) -> None:
        await self._secure.delete_item(CREDENTIALS_KEY)
