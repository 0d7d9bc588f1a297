"""Application context and dependency injection.

The ApplicationContext wires together storage, the store, the API client
and the refresh service, and owns their lifecycle.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from budgetly.api.client import ApiClient
from budgetly.api.resilience import with_retry
from budgetly.data.device_storage import DeviceStorage
from budgetly.data.local_cache import LocalCache, is_cache_stale
from budgetly.data.secure_store import CredentialStore, SecureStore
from budgetly.domain.models import CacheMetadata, Credentials
from budgetly.domain.settings import AppSettings
from budgetly.services.refresh import RefreshService
from budgetly.state.persistence import StorePersistence
from budgetly.state.settings_store import SettingsStore
from budgetly.state.store import Store

logger = logging.getLogger(__name__)

T = TypeVar("T")


def configure_logging(level: str) -> None:
    """Set the level of the ``budgetly`` logger hierarchy."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("budgetly").setLevel(level)


class ApplicationContext:
    """Application context providing dependency injection.

    Example:
        >>> ctx = ApplicationContext()
        >>> await ctx.initialize()
        >>> if not ctx.store.get().is_authenticated:
        ...     await ctx.sign_in(Credentials(endpoint_url=url, access_token=token))
        >>> accounts = await ctx.refresh.refresh_accounts()
        >>> await ctx.close()
    """

    def __init__(
        self,
        settings_store: Optional[SettingsStore] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize application context.

        Args:
            settings_store: Optional settings store (defaults to ~/.budgetly/settings.json)
            http_transport: Optional httpx transport for the API client (used by tests)
        """
        self.settings_store = settings_store or SettingsStore()
        self.settings: AppSettings = self.settings_store.load()
        configure_logging(self.settings.logging.level)

        data_dir: Path = self.settings.storage.resolve_data_dir()
        storage_settings = self.settings.storage

        self.device_storage = DeviceStorage(data_dir / storage_settings.device_storage_name)
        self.secure_store = SecureStore(
            data_dir / storage_settings.secure_store_name,
            data_dir / storage_settings.secure_key_name,
        )
        self.credential_store = CredentialStore(self.secure_store)
        self.cache = LocalCache(self.device_storage, version=self.settings.cache.version)

        self.store = Store(
            self.credential_store,
            self.cache,
            dashboard_sections=self.settings.dashboard.default_order,
        )
        self.persistence = StorePersistence(self.store, self.device_storage)

        self.client = ApiClient(
            timeout=self.settings.api.timeout_seconds, http_transport=http_transport
        )
        self.refresh = RefreshService(self.client, self.store)

    async def initialize(self) -> None:
        """Open storage, restore persisted state and saved credentials.

        Must be called before using the context.
        """
        await self.device_storage.initialize()
        await self.persistence.rehydrate()
        self.persistence.start()

        credentials = await self.store.load_credentials()
        if credentials is not None:
            self.client.initialize(credentials)
            logger.info("Restored saved credentials")

    async def sign_in(self, credentials: Credentials) -> None:
        """Check the server accepts the credentials, then save them.

        Raises:
            ApiError: If the server rejects or cannot be reached; the
                previous session (if any) stays live and nothing is saved
        """
        previous = self.client.transport
        self.client.initialize(credentials)
        try:
            about = await self.client.validate_connection()
            await self.store.set_credentials(credentials)
        except Exception:
            await self.client.restore(previous)
            raise
        logger.info(f"Signed in to Firefly III {about.data.version}")

    async def sign_out(self) -> None:
        """Forget credentials, the offline cache and the pending queue."""
        await self.store.clear_credentials()
        await self.client.reset()

    def is_sync_stale(self, last_synced: Optional[int]) -> bool:
        """Check a ``last_*_sync`` timestamp against the configured max age."""
        if last_synced is None:
            return True
        metadata = CacheMetadata(last_synced=last_synced, version=self.cache.version)
        return is_cache_stale(metadata, self.settings.cache.max_age_hours)

    async def retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an API call, retrying transient failures per ``RetrySettings``."""
        retry = self.settings.retry
        return await with_retry(
            operation,
            max_retries=retry.max_retries,
            initial_delay=retry.initial_delay_seconds,
            max_delay=retry.max_delay_seconds,
        )

    async def close(self) -> None:
        """Flush pending writes and close resources."""
        self.persistence.stop()
        try:
            await asyncio.wait_for(self.persistence.flush(), timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("Store snapshot flush timed out")
        await self.client.close()
        await self.device_storage.close()
