"""Dashboard section identifiers."""

# Default order of dashboard sections (all visible on first load)
DEFAULT_DASHBOARD_VISIBLE_ORDER: tuple[str, ...] = (
    "netWorth",
    "topAccounts",
    "expensesByAccount",
    "summaryCards",
    "accountsOverview",
    "budgetStatus",
    "quickInsights",
)
