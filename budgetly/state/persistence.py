"""Partial persistence of the store to device storage.

On every state change the persisted subset (UI flags, dashboard layout,
cache mirror, pending queue) is serialized and written under one key.
Credentials are never part of the snapshot; they live only in the secure
store.
"""

import asyncio
import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from budgetly.data.device_storage import DeviceStorage
from budgetly.domain.models import (
    Account,
    BudgetLimit,
    Envelope,
    ExpenseSummary,
    PendingTransaction,
    TransactionGroup,
)
from budgetly.state.store import Store
from budgetly.state.types import PERSISTED_FIELDS, AppState

logger = logging.getLogger(__name__)

STORAGE_KEY = "budgetly-storage"
SNAPSHOT_VERSION = 0


class PersistedState(BaseModel):
    """The subset of ``AppState`` written to device storage."""

    balance_visible: bool = True
    theme_mode: Literal["system", "light", "dark"] = "system"
    dashboard_visible_section_ids: Optional[list[str]] = None
    dashboard_hidden_section_ids: list[str] = Field(default_factory=list)
    cached_accounts: Optional[list[Account]] = None
    cached_transactions: Optional[list[TransactionGroup]] = None
    cached_budget_limits: Optional[Envelope[list[BudgetLimit]]] = None
    cached_expenses_by_range: Optional[dict[str, list[ExpenseSummary]]] = None
    last_accounts_sync: Optional[int] = None
    last_transactions_sync: Optional[int] = None
    last_budget_limits_sync: Optional[int] = None
    pending_transactions: list[PendingTransaction] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_state(cls, state: AppState) -> "PersistedState":
        values = {name: getattr(state, name) for name in PERSISTED_FIELDS}
        values["dashboard_visible_section_ids"] = list(state.dashboard_visible_section_ids)
        values["dashboard_hidden_section_ids"] = sorted(state.dashboard_hidden_section_ids)
        values["pending_transactions"] = list(state.pending_transactions)
        if state.cached_expenses_by_range is not None:
            values["cached_expenses_by_range"] = dict(state.cached_expenses_by_range)
        return cls(**values)


def serialize_state(state: AppState) -> str:
    """Serialize the persisted subset of a state as JSON."""
    snapshot = PersistedState.from_state(state)
    return json.dumps({
        "state": snapshot.model_dump(mode="json"),
        "version": SNAPSHOT_VERSION,
    })


class StorePersistence:
    """Writes store snapshots to device storage and restores them.

    Example:
        >>> persistence = StorePersistence(store, storage)
        >>> await persistence.rehydrate()
        >>> persistence.start()
        >>> store.toggle_balance_visibility()
        >>> await persistence.flush()
    """

    def __init__(self, store: Store, storage: DeviceStorage, key: str = STORAGE_KEY):
        self._store = store
        self._storage = storage
        self._key = key
        self._last_snapshot: Optional[str] = None
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()
        self._unsubscribe = None

    def start(self) -> None:
        """Persist on every subsequent state change."""
        if self._unsubscribe is None:
            self._last_snapshot = serialize_state(self._store.get())
            self._unsubscribe = self._store.subscribe(self._on_change)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, state: AppState) -> None:
        snapshot = serialize_state(state)
        if snapshot == self._last_snapshot:
            return  # only non-persisted fields changed
        self._last_snapshot = snapshot

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; store snapshot not persisted")
            return
        task = loop.create_task(self._write(snapshot))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, snapshot: str) -> None:
        # Snapshots are written in the order the changes happened
        async with self._write_lock:
            try:
                await self._storage.set_item(self._key, snapshot)
            except Exception as e:
                logger.error(f"Failed to persist store snapshot: {e}")

    async def flush(self) -> None:
        """Wait until every scheduled snapshot write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def rehydrate(self) -> bool:
        """Restore the persisted subset into the store.

        Unknown fields are ignored; a missing or malformed snapshot leaves
        the store at its defaults.

        Returns:
            True if a snapshot was applied
        """
        try:
            raw = await self._storage.get_item(self._key)
        except Exception as e:
            logger.error(f"Failed to read store snapshot: {e}")
            return False
        if raw is None:
            return False

        try:
            envelope = json.loads(raw)
            snapshot = PersistedState.model_validate(envelope.get("state", {}))
        except (ValueError, AttributeError, ValidationError) as e:
            logger.warning(f"Ignoring malformed store snapshot: {e}")
            return False

        self._store.set({
            "balance_visible": snapshot.balance_visible,
            "theme_mode": snapshot.theme_mode,
            "cached_accounts": snapshot.cached_accounts,
            "cached_transactions": snapshot.cached_transactions,
            "cached_budget_limits": snapshot.cached_budget_limits,
            "cached_expenses_by_range": snapshot.cached_expenses_by_range,
            "last_accounts_sync": snapshot.last_accounts_sync,
            "last_transactions_sync": snapshot.last_transactions_sync,
            "last_budget_limits_sync": snapshot.last_budget_limits_sync,
            "pending_transactions": tuple(snapshot.pending_transactions),
        })
        if snapshot.dashboard_visible_section_ids is not None:
            self._store.set_dashboard_sections(
                snapshot.dashboard_visible_section_ids,
                snapshot.dashboard_hidden_section_ids,
            )
        logger.info("Store rehydrated from device storage")
        return True
