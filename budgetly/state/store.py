"""Central application store.

The store composes independent slices (credentials, UI, cache mirror,
pending queue, dashboard layout) over one shared state record. Slices read
with ``get()`` and write with ``set()``; subscribers are notified through the
``changed`` Qt signal after every state transition.

Example:
    >>> store = Store(credential_store, cache)
    >>> store.subscribe(lambda state: print(state.balance_visible))
    >>> store.toggle_balance_visibility()  # Prints: False
"""

from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, Union

from budgetly.data.local_cache import LocalCache
from budgetly.data.secure_store import CredentialStore
from budgetly.domain.dashboard import DEFAULT_DASHBOARD_VISIBLE_ORDER
from budgetly.state.cache_slice import CacheSlice
from budgetly.state.credentials import CredentialsSlice
from budgetly.state.dashboard import DashboardSlice
from budgetly.state.observable import Observable
from budgetly.state.pending import PendingSlice
from budgetly.state.types import AppState
from budgetly.state.ui import UiSlice

PartialState = Union[dict[str, Any], Callable[[AppState], dict[str, Any]]]


class Store(CredentialsSlice, UiSlice, CacheSlice, PendingSlice, DashboardSlice):
    """Composed reactive store."""

    def __init__(
        self,
        credential_store: CredentialStore,
        cache: LocalCache,
        dashboard_sections: Optional[Iterable[str]] = None,
    ):
        """Initialize store with default state.

        Args:
            credential_store: Secure persistence for credentials
            cache: Durable offline cache mirrored by the cache slice
            dashboard_sections: Known dashboard section ids in default order
        """
        self._credential_store = credential_store
        self._cache = cache
        self._dashboard_sections = tuple(dashboard_sections or DEFAULT_DASHBOARD_VISIBLE_ORDER)
        self._init_cache_slice()
        self._state = Observable(
            AppState(dashboard_visible_section_ids=self._dashboard_sections)
        )

    @property
    def changed(self):
        """Qt signal emitted with the new ``AppState`` after each change."""
        return self._state.changed

    def get(self) -> AppState:
        return self._state.value

    def set(self, partial: PartialState) -> None:
        """Apply a partial update atomically.

        Args:
            partial: Field updates, or a function computing them from the
                current state. An empty update leaves the state untouched.
        """
        def apply(state: AppState) -> AppState:
            changes = partial(state) if callable(partial) else partial
            return replace(state, **changes) if changes else state

        self._state.update(apply)

    def subscribe(self, callback: Callable[[AppState], None]) -> Callable[[], None]:
        """Subscribe to state changes.

        Returns:
            Function that removes the subscription
        """
        return self._state.subscribe(callback)

    def select(self, selector: Callable[[AppState], Any]) -> Any:
        """Read a derived value from the current state."""
        return selector(self._state.value)
