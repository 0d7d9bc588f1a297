"""Refresh the offline cache from the server.

Each refresh takes a sync token before fetching, so when two refreshes of
the same collection overlap only the one started last can land in the cache.
When the server cannot be reached the cached copy is returned instead;
every other error propagates to the caller.
"""

import logging
from typing import Optional

from budgetly.api.client import ApiClient
from budgetly.api.errors import UnreachableError
from budgetly.domain.models import (
    Account,
    BudgetLimit,
    Envelope,
    ExpenseSummary,
    TransactionGroup,
)
from budgetly.state.store import Store

logger = logging.getLogger(__name__)


class RefreshService:
    """Fetches complete collections and writes them through the store.

    Example:
        >>> service = RefreshService(client, store)
        >>> accounts = await service.refresh_accounts()
    """

    def __init__(self, client: ApiClient, store: Store):
        self._client = client
        self._store = store

    async def refresh_accounts(self, type: str = "all") -> Optional[list[Account]]:
        """Fetch every account page and cache the result.

        Returns:
            Fresh accounts, or the cached ones if the server is unreachable
            (None if nothing is cached either)
        """
        token = self._store.next_sync_token()
        try:
            envelope = await self._client.get_all_accounts(type=type)
        except UnreachableError as e:
            logger.warning(f"Accounts refresh failed, using cache: {e}")
            return await self._cached_or_mirror(
                self._store.get_cached_accounts, "cached_accounts"
            )

        await self._store.set_cached_accounts(envelope.data, token=token)
        logger.info(f"Refreshed {len(envelope.data)} accounts")
        return envelope.data

    async def refresh_transactions(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        type: Optional[str] = None,
    ) -> Optional[list[TransactionGroup]]:
        """Fetch every transaction page and cache the result."""
        token = self._store.next_sync_token()
        try:
            envelope = await self._client.get_all_transactions(start=start, end=end, type=type)
        except UnreachableError as e:
            logger.warning(f"Transactions refresh failed, using cache: {e}")
            return await self._cached_or_mirror(
                self._store.get_cached_transactions, "cached_transactions"
            )

        await self._store.set_cached_transactions(envelope.data, token=token)
        logger.info(f"Refreshed {len(envelope.data)} transactions")
        return envelope.data

    async def refresh_budget_limits(
        self, start: str, end: str
    ) -> Optional[Envelope[list[BudgetLimit]]]:
        """Fetch every budget-limit page for a period and cache the envelope."""
        token = self._store.next_sync_token()
        try:
            envelope = await self._client.get_all_budget_limits(start, end)
        except UnreachableError as e:
            logger.warning(f"Budget limits refresh failed, using cache: {e}")
            return await self._cached_or_mirror(
                self._store.get_cached_budget_limits, "cached_budget_limits"
            )

        await self._store.set_cached_budget_limits(envelope, token=token)
        return envelope

    async def refresh_expenses(self, start: str, end: str) -> Optional[list[ExpenseSummary]]:
        """Fetch expense totals per expense account for a period and cache them."""
        token = self._store.next_sync_token()
        try:
            expenses = await self._client.get_expenses_by_expense_account(start, end)
        except UnreachableError as e:
            logger.warning(f"Expenses refresh for {start}..{end} failed, using cache: {e}")
            return await self._store.get_cached_expenses_by_range(start, end)

        await self._store.set_cached_expenses_by_range(start, end, expenses, token=token)
        return expenses

    async def _cached_or_mirror(self, load, field: str):
        cached = await load()
        if cached is not None:
            return cached
        return getattr(self._store.get(), field)
