"""Cache-mirror slice: in-memory projection of the offline cache.

Every write goes to the durable ``LocalCache`` first; the mirror is updated
only once that write has succeeded.

Concurrent writes to the same collection are ordered by sync token. A token
is taken when a refresh starts (``next_sync_token()``); a write carrying a
token older than the last one applied for that collection is dropped, so a
slow, stale response can never overwrite a newer one.
"""

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from budgetly.data.local_cache import (
    ACCOUNTS_KEY,
    BUDGET_LIMITS_KEY,
    TRANSACTIONS_KEY,
    expenses_by_range_key,
    now_ms,
)
from budgetly.domain.models import (
    Account,
    BudgetLimit,
    Envelope,
    ExpenseSummary,
    TransactionGroup,
)

if TYPE_CHECKING:
    from budgetly.data.local_cache import LocalCache

logger = logging.getLogger(__name__)


def expenses_range_key(start: str, end: str) -> str:
    return f"{start}_{end}"


class CacheSlice:
    """Actions for the ``cached_*`` and ``last_*_sync`` fields."""

    _cache: "LocalCache"

    def _init_cache_slice(self) -> None:
        self._sync_tokens = itertools.count(1)
        self._token_floor = 0
        self._applied_tokens: dict[str, int] = {}
        self._write_locks: dict[str, asyncio.Lock] = {}

    def next_sync_token(self) -> int:
        """Take a token for a refresh that is about to start."""
        return next(self._sync_tokens)

    def invalidate_cache_writes(self) -> None:
        """Drop every cache write whose token was taken before now."""
        self._token_floor = self.next_sync_token()

    async def _write_through(
        self,
        key: str,
        token: Optional[int],
        write: Callable[[], Awaitable[bool]],
        mirror: Callable[[], dict[str, Any]],
    ) -> bool:
        """Write durably, then update the mirror, unless the token is stale.

        Returns:
            True if both the durable write and the mirror update happened
        """
        if token is None:
            token = self.next_sync_token()
        lock = self._write_locks.setdefault(key, asyncio.Lock())
        async with lock:
            newest = max(self._token_floor, self._applied_tokens.get(key, 0))
            if token < newest:
                logger.debug(f"Dropping stale cache write for {key} (token {token} < {newest})")
                return False
            if not await write():
                logger.warning(f"Durable cache write failed for {key}; mirror left unchanged")
                return False
            self._applied_tokens[key] = token
            self.set(mirror())
            return True

    # Accounts

    async def set_cached_accounts(
        self, accounts: list[Account], token: Optional[int] = None
    ) -> bool:
        """Cache the full account list.

        Args:
            accounts: Complete account collection
            token: Sync token taken when the fetch started (defaults to now)

        Returns:
            True if the cache and mirror were updated
        """
        return await self._write_through(
            ACCOUNTS_KEY,
            token,
            lambda: self._cache.set_accounts(accounts),
            lambda: {"cached_accounts": list(accounts), "last_accounts_sync": now_ms()},
        )

    async def get_cached_accounts(self) -> Optional[list[Account]]:
        """Load cached accounts into the mirror.

        Returns:
            Cached accounts, or None if nothing is cached
        """
        entry = await self._cache.get_accounts()
        if entry is None:
            return None
        self.set({
            "cached_accounts": entry.data,
            "last_accounts_sync": entry.metadata.last_synced,
        })
        return entry.data

    async def update_cached_account(self, account: Account) -> bool:
        """Replace one account in the cached list by id (e.g. after an edit).

        Does nothing if no accounts are cached or the id is not present.
        """
        current = self.get().cached_accounts
        if not current or not any(a.id == account.id for a in current):
            return False
        updated = [account if a.id == account.id else a for a in current]
        return await self.set_cached_accounts(updated)

    # Transactions

    async def set_cached_transactions(
        self, transactions: list[TransactionGroup], token: Optional[int] = None
    ) -> bool:
        return await self._write_through(
            TRANSACTIONS_KEY,
            token,
            lambda: self._cache.set_transactions(transactions),
            lambda: {
                "cached_transactions": list(transactions),
                "last_transactions_sync": now_ms(),
            },
        )

    async def get_cached_transactions(self) -> Optional[list[TransactionGroup]]:
        entry = await self._cache.get_transactions()
        if entry is None:
            return None
        self.set({
            "cached_transactions": entry.data,
            "last_transactions_sync": entry.metadata.last_synced,
        })
        return entry.data

    # Budget limits

    async def set_cached_budget_limits(
        self, data: Envelope[list[BudgetLimit]], token: Optional[int] = None
    ) -> bool:
        return await self._write_through(
            BUDGET_LIMITS_KEY,
            token,
            lambda: self._cache.set_budget_limits(data),
            lambda: {"cached_budget_limits": data, "last_budget_limits_sync": now_ms()},
        )

    async def get_cached_budget_limits(self) -> Optional[Envelope[list[BudgetLimit]]]:
        entry = await self._cache.get_budget_limits()
        if entry is None:
            return None
        self.set({
            "cached_budget_limits": entry.data,
            "last_budget_limits_sync": entry.metadata.last_synced,
        })
        return entry.data

    # Expenses by date range

    async def set_cached_expenses_by_range(
        self,
        start: str,
        end: str,
        data: list[ExpenseSummary],
        token: Optional[int] = None,
    ) -> bool:
        range_key = expenses_range_key(start, end)
        return await self._write_through(
            expenses_by_range_key(start, end),
            token,
            lambda: self._cache.set_expenses_by_range(start, end, data),
            lambda: {
                "cached_expenses_by_range": {
                    **(self.get().cached_expenses_by_range or {}),
                    range_key: list(data),
                }
            },
        )

    async def get_cached_expenses_by_range(
        self, start: str, end: str
    ) -> Optional[list[ExpenseSummary]]:
        """Get expenses for a range, from the durable cache or the mirror."""
        range_key = expenses_range_key(start, end)
        entry = await self._cache.get_expenses_by_range(start, end)
        if entry is None:
            return (self.get().cached_expenses_by_range or {}).get(range_key)
        self.set(lambda state: {
            "cached_expenses_by_range": {
                **(state.cached_expenses_by_range or {}),
                range_key: entry.data,
            }
        })
        return entry.data

    # Whole cache

    async def clear_cache(self) -> bool:
        """Delete the durable cache and reset the mirror.

        Returns:
            True if the durable cache was cleared
        """
        self.invalidate_cache_writes()
        cleared = await self._cache.clear()
        self.set({
            "cached_accounts": None,
            "cached_transactions": None,
            "cached_budget_limits": None,
            "cached_expenses_by_range": None,
            "last_accounts_sync": None,
            "last_transactions_sync": None,
            "last_budget_limits_sync": None,
        })
        return cleared
