"""Offline cache of remote collections.

Each cached collection is stored as one JSON entry
``{"data": ..., "metadata": {"lastSynced": <epoch ms>, "version": ...}}``
under a fixed ``cache_``-prefixed key. Writes always replace the whole entry;
only complete (fully aggregated) collections should be written.

The cache is best-effort: every failure is logged and absorbed. Reads that
fail return None, writes that fail return False.
"""

import json
import logging
import time
from typing import Any, Optional, TypeVar

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from budgetly.data.device_storage import DeviceStorage
from budgetly.domain.models import (
    Account,
    BudgetLimit,
    CacheEntry,
    CacheMetadata,
    Envelope,
    ExpenseSummary,
    TransactionGroup,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_PREFIX = "cache_"

ACCOUNTS_KEY = "cache_accounts"
TRANSACTIONS_KEY = "cache_transactions"
BUDGET_LIMITS_KEY = "cache_budget_limits"
EXPENSES_BY_RANGE_KEY = "cache_expenses_by_range"

DEFAULT_CACHE_VERSION = "1.0.0"

MS_PER_HOUR = 60 * 60 * 1000


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def expenses_by_range_key(start: str, end: str) -> str:
    return f"{EXPENSES_BY_RANGE_KEY}_{start}_{end}"


def is_cache_stale(
    metadata: CacheMetadata, max_age_hours: float = 24, now: Optional[int] = None
) -> bool:
    """Check whether a cache entry is older than ``max_age_hours``.

    A stale entry is still usable; staleness only tells the caller to
    prefer a refetch.

    Args:
        metadata: Metadata of the cache entry
        max_age_hours: Maximum age in hours (default: 24)
        now: Current time in epoch ms (defaults to the wall clock)

    Returns:
        True if the entry is strictly older than the maximum age
    """
    current = now_ms() if now is None else now
    return (current - metadata.last_synced) > max_age_hours * MS_PER_HOUR


class LocalCache:
    """Key/value cache of remote collections with sync metadata.

    Example:
        >>> cache = LocalCache(storage)
        >>> await cache.set_accounts(accounts)
        >>> entry = await cache.get_accounts()
        >>> entry.data == accounts
        True
    """

    def __init__(self, storage: DeviceStorage, version: str = DEFAULT_CACHE_VERSION):
        """Initialize local cache.

        Args:
            storage: Device storage to persist entries in
            version: Version tag written into every entry's metadata
        """
        self._storage = storage
        self._version = version

    @property
    def version(self) -> str:
        return self._version

    # Generic operations

    async def get(self, key: str) -> Optional[Any]:
        """Get the decoded JSON stored under a key, or None."""
        try:
            value = await self._storage.get_item(key)
            return json.loads(value) if value else None
        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable value (pydantic models allowed).

        Returns:
            True if the value was written, False if the write failed
        """
        try:
            payload = json.dumps(to_jsonable_python(value, by_alias=True))
            await self._storage.set_item(key, payload)
            return True
        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def remove(self, key: str) -> bool:
        try:
            await self._storage.remove_item(key)
            return True
        except Exception as e:
            logger.error(f"Cache remove error for key {key}: {e}")
            return False

    async def clear(self) -> bool:
        """Remove every ``cache_``-prefixed key.

        Returns:
            True if the cache was cleared, False if clearing failed
        """
        try:
            keys = await self._storage.get_all_keys()
            cache_keys = [key for key in keys if key.startswith(CACHE_PREFIX)]
            await self._storage.multi_remove(cache_keys)
            logger.info(f"Cache cleared ({len(cache_keys)} entries)")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {e}")
            return False

    # Entries with metadata

    def _make_entry(self, data: Any) -> dict[str, Any]:
        return {
            "data": data,
            "metadata": {"lastSynced": now_ms(), "version": self._version},
        }

    async def _get_entry(self, key: str, data_type: type[T]) -> Optional[CacheEntry[T]]:
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return TypeAdapter(CacheEntry[data_type]).validate_python(raw)
        except ValueError as e:
            logger.error(f"Discarding malformed cache entry {key}: {e}")
            return None

    async def _set_entry(self, key: str, data: Any) -> bool:
        return await self.set(key, self._make_entry(data))

    async def get_accounts(self) -> Optional[CacheEntry[list[Account]]]:
        return await self._get_entry(ACCOUNTS_KEY, list[Account])

    async def set_accounts(self, accounts: list[Account]) -> bool:
        return await self._set_entry(ACCOUNTS_KEY, accounts)

    async def get_transactions(self) -> Optional[CacheEntry[list[TransactionGroup]]]:
        return await self._get_entry(TRANSACTIONS_KEY, list[TransactionGroup])

    async def set_transactions(self, transactions: list[TransactionGroup]) -> bool:
        return await self._set_entry(TRANSACTIONS_KEY, transactions)

    async def get_budget_limits(self) -> Optional[CacheEntry[Envelope[list[BudgetLimit]]]]:
        return await self._get_entry(BUDGET_LIMITS_KEY, Envelope[list[BudgetLimit]])

    async def set_budget_limits(self, data: Envelope[list[BudgetLimit]]) -> bool:
        """Cache a full budget-limits response (limits plus included budgets)."""
        return await self._set_entry(BUDGET_LIMITS_KEY, data)

    async def get_expenses_by_range(
        self, start: str, end: str
    ) -> Optional[CacheEntry[list[ExpenseSummary]]]:
        return await self._get_entry(expenses_by_range_key(start, end), list[ExpenseSummary])

    async def set_expenses_by_range(
        self, start: str, end: str, data: list[ExpenseSummary]
    ) -> bool:
        return await self._set_entry(expenses_by_range_key(start, end), data)

    def is_stale(self, entry: CacheEntry, max_age_hours: float = 24) -> bool:
        return is_cache_stale(entry.metadata, max_age_hours)
