"""Shape of the store's state.

The state is one immutable record; every action produces a new record via a
single ``Store.set()`` call.
"""

from dataclasses import dataclass
from typing import Literal, Mapping, Optional

from budgetly.domain.dashboard import DEFAULT_DASHBOARD_VISIBLE_ORDER
from budgetly.domain.models import (
    Account,
    BudgetLimit,
    Credentials,
    Envelope,
    ExpenseSummary,
    PendingTransaction,
    TransactionGroup,
)

ThemeMode = Literal["system", "light", "dark"]


@dataclass(frozen=True)
class AppState:
    """Complete store state, grouped by the slice that owns each field."""

    # Credentials slice (never persisted to device storage)
    credentials: Optional[Credentials] = None
    is_authenticated: bool = False
    is_loading: bool = True

    # UI slice
    balance_visible: bool = True
    theme_mode: ThemeMode = "system"

    # Cache-mirror slice
    cached_accounts: Optional[list[Account]] = None
    cached_transactions: Optional[list[TransactionGroup]] = None
    cached_budget_limits: Optional[Envelope[list[BudgetLimit]]] = None
    # Key: "<start>_<end>"
    cached_expenses_by_range: Optional[Mapping[str, list[ExpenseSummary]]] = None
    last_accounts_sync: Optional[int] = None
    last_transactions_sync: Optional[int] = None
    last_budget_limits_sync: Optional[int] = None

    # Pending slice
    pending_transactions: tuple[PendingTransaction, ...] = ()

    # Dashboard-layout slice
    dashboard_visible_section_ids: tuple[str, ...] = DEFAULT_DASHBOARD_VISIBLE_ORDER
    dashboard_hidden_section_ids: frozenset[str] = frozenset()


UI_FIELDS = ("balance_visible", "theme_mode")

CACHE_MIRROR_FIELDS = (
    "cached_accounts",
    "cached_transactions",
    "cached_budget_limits",
    "cached_expenses_by_range",
    "last_accounts_sync",
    "last_transactions_sync",
    "last_budget_limits_sync",
)

PENDING_FIELDS = ("pending_transactions",)

DASHBOARD_FIELDS = ("dashboard_visible_section_ids", "dashboard_hidden_section_ids")

# Fields written to device storage on every change
PERSISTED_FIELDS = UI_FIELDS + DASHBOARD_FIELDS + CACHE_MIRROR_FIELDS + PENDING_FIELDS
