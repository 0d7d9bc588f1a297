"""Credentials slice: sign-in state backed by the secure store."""

import logging
from typing import TYPE_CHECKING, Optional

from budgetly.domain.models import Credentials

if TYPE_CHECKING:
    from budgetly.data.local_cache import LocalCache
    from budgetly.data.secure_store import CredentialStore

logger = logging.getLogger(__name__)


class CredentialsSlice:
    """Actions for ``credentials``, ``is_authenticated`` and ``is_loading``."""

    _credential_store: "CredentialStore"
    _cache: "LocalCache"

    async def set_credentials(self, credentials: Credentials) -> None:
        """Save credentials to the secure store, then mark signed in.

        Raises:
            Exception: If the secure store write fails; state is unchanged
        """
        await self._credential_store.save(credentials)
        self.set({"credentials": credentials, "is_authenticated": True})

    async def load_credentials(self) -> Optional[Credentials]:
        """Restore credentials from the secure store on startup.

        A store that cannot be read is treated as signed out.

        Returns:
            The loaded credentials, or None
        """
        self.set({"is_loading": True})
        try:
            credentials = await self._credential_store.load()
        except Exception as e:
            logger.error(f"Failed to load credentials: {e}")
            credentials = None

        self.set({
            "credentials": credentials,
            "is_authenticated": credentials is not None,
            "is_loading": False,
        })
        return credentials

    async def clear_credentials(self) -> None:
        """Sign out.

        Deletes the stored credentials and the offline cache, then resets
        credentials, cache mirror and pending queue in one state update.
        UI preferences and dashboard layout are kept.

        Raises:
            Exception: If the secure store delete fails; state is unchanged
        """
        await self._credential_store.clear()
        self.invalidate_cache_writes()
        await self._cache.clear()
        self.set({
            "credentials": None,
            "is_authenticated": False,
            "cached_accounts": None,
            "cached_transactions": None,
            "cached_budget_limits": None,
            "cached_expenses_by_range": None,
            "last_accounts_sync": None,
            "last_transactions_sync": None,
            "last_budget_limits_sync": None,
            "pending_transactions": (),
        })
        logger.info("Credentials cleared")
