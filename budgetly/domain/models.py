"""Domain models for the Firefly III remote API.

Every record returned by the server is validated into one of these pydantic
models at the request-function boundary. Records follow the JSON:API shape
``{id, type, attributes}``; unknown server fields are ignored so that newer
server versions do not break the client.
"""

from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class FireflyModel(BaseModel):
    """Base for all models parsed from server responses."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RequestBody(BaseModel):
    """Base for payloads sent to the server.

    Unset optional fields are dropped when serialized so that the server
    keeps its own defaults.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


# ---------------------------------------------------------------------------
# Credentials and envelopes
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """Remote endpoint and personal access token.

    Serialized with the original camelCase keys so records written by older
    clients still load.
    """

    endpoint_url: str = Field(alias="instanceUrl", min_length=1)
    access_token: str = Field(alias="personalAccessToken", min_length=1)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def api_base_url(self) -> str:
        """Endpoint with a trailing slash and the ``api/v1/`` suffix."""
        base = self.endpoint_url if self.endpoint_url.endswith("/") else f"{self.endpoint_url}/"
        return f"{base}api/v1/"


class Pagination(FireflyModel):
    total: int = 0
    count: int = 0
    per_page: int = 0
    current_page: int = 1
    total_pages: int = 1


class Meta(FireflyModel):
    pagination: Optional[Pagination] = None


class Envelope(FireflyModel, Generic[T]):
    """The ``{data, meta}`` wrapper returned by list and detail endpoints."""

    data: T
    meta: Optional[Meta] = None
    included: Optional[list[dict[str, Any]]] = None
    links: Optional[dict[str, Any]] = None

    @property
    def total_pages(self) -> int:
        """Page count reported by the server; 1 when not paginated."""
        if self.meta is None or self.meta.pagination is None:
            return 1
        return self.meta.pagination.total_pages


class CacheMetadata(BaseModel):
    last_synced: int = Field(alias="lastSynced")
    version: str

    model_config = ConfigDict(populate_by_name=True)


class CacheEntry(BaseModel, Generic[T]):
    """A cached collection with its sync metadata."""

    data: T
    metadata: CacheMetadata


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class AccountAttributes(FireflyModel):
    name: str
    type: str
    account_role: Optional[str] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_name: Optional[str] = None
    currency_symbol: Optional[str] = None
    currency_decimal_places: Optional[int] = None
    current_balance: Optional[str] = None
    current_balance_date: Optional[str] = None
    debt_amount: Optional[str] = None
    iban: Optional[str] = None
    account_number: Optional[str] = None
    bic: Optional[str] = None
    active: bool = True
    include_net_worth: bool = True
    opening_balance: Optional[str] = None
    opening_balance_date: Optional[str] = None
    monthly_payment_date: Optional[str] = None
    cc_monthly_payment_date: Optional[str] = None
    virtual_balance: Optional[str] = None
    notes: Optional[str] = None
    liability_type: Optional[str] = None
    liability_direction: Optional[Literal["credit", "debit"]] = None
    interest: Optional[str] = None
    interest_period: Optional[str] = None
    credit_card_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zoom_level: Optional[int] = None
    order: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Account(FireflyModel):
    id: str
    type: str = "accounts"
    attributes: AccountAttributes


class AccountOverview(FireflyModel):
    """One series of the account overview chart."""

    label: str
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    currency_decimal_places: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    type: Optional[str] = None
    period: Optional[str] = None
    entries: dict[str, Any] = Field(default_factory=dict)
    pc_entries: dict[str, Any] = Field(default_factory=dict)


AccountRole = Literal["defaultAsset", "sharedAsset", "savingAsset", "ccAsset", "cashWalletAsset"]
LiabilityType = Literal["loan", "debt", "mortgage"]


class AccountUpdateRequest(RequestBody):
    """Body for ``PUT accounts/{id}``."""

    name: str
    iban: Optional[str] = None
    bic: Optional[str] = None
    account_number: Optional[str] = None
    opening_balance: Optional[str] = None
    opening_balance_date: Optional[str] = None
    virtual_balance: Optional[str] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    active: Optional[bool] = None
    order: Optional[int] = None
    include_net_worth: Optional[bool] = None
    account_role: Optional[AccountRole] = None
    credit_card_type: Optional[Literal["monthlyFull"]] = None
    monthly_payment_date: Optional[str] = None
    liability_type: Optional[LiabilityType] = None
    liability_direction: Optional[Literal["credit", "debit"]] = None
    interest: Optional[str] = None
    interest_period: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zoom_level: Optional[int] = None


class AccountStoreRequest(AccountUpdateRequest):
    """Body for ``POST accounts``."""

    type: Literal["asset", "expense", "import", "revenue", "cash", "liability", "liabilities", "initial-balance", "reconciliation"]


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TransactionSplit(FireflyModel):
    user: Optional[int | str] = None
    transaction_journal_id: Optional[str] = None
    type: str
    date: str
    order: Optional[int] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    currency_decimal_places: Optional[int] = None
    amount: str
    description: str
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    destination_id: Optional[str] = None
    destination_name: Optional[str] = None
    budget_id: Optional[str] = None
    budget_name: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    reconciled: bool = False
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class TransactionAttributes(FireflyModel):
    group_title: Optional[str] = None
    transactions: list[TransactionSplit]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TransactionGroup(FireflyModel):
    """A transaction group: one or more splits booked together."""

    id: str
    type: str = "transactions"
    attributes: TransactionAttributes


TransactionType = Literal["withdrawal", "deposit", "transfer"]


class NewTransactionSplit(RequestBody):
    type: TransactionType
    date: str
    amount: str
    description: str
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    destination_id: Optional[str] = None
    destination_name: Optional[str] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    budget_id: Optional[str] = None
    budget_name: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    tags: Optional[list[str]] = None
    notes: Optional[str] = None


class CreateTransactionData(RequestBody):
    """Body for ``POST transactions`` and ``PUT transactions/{id}``."""

    error_if_duplicate_hash: Optional[bool] = None
    apply_rules: Optional[bool] = None
    fire_webhooks: Optional[bool] = None
    group_title: Optional[str] = None
    transactions: list[NewTransactionSplit] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


class BudgetSpent(FireflyModel):
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    currency_decimal_places: Optional[int] = None
    amount: str


class BudgetAttributes(FireflyModel):
    name: str
    active: bool = True
    auto_budget_type: Optional[str] = None
    auto_budget_currency_id: Optional[str] = None
    auto_budget_currency_code: Optional[str] = None
    auto_budget_amount: Optional[str] = None
    auto_budget_period: Optional[str] = None
    spent: list[BudgetSpent] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Budget(FireflyModel):
    id: str
    type: str = "budgets"
    attributes: BudgetAttributes


class BudgetLimitAttributes(FireflyModel):
    budget_id: str
    start: str
    end: str
    amount: str
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    spent: Optional[str | list[BudgetSpent]] = None


class BudgetLimit(FireflyModel):
    id: str
    type: str = "budget_limits"
    attributes: BudgetLimitAttributes


class CreateBudgetData(RequestBody):
    name: str
    active: Optional[bool] = None
    auto_budget_type: Optional[Literal["reset", "rollover", "none"]] = None
    auto_budget_currency_id: Optional[str] = None
    auto_budget_currency_code: Optional[str] = None
    auto_budget_amount: Optional[str] = None
    auto_budget_period: Optional[
        Literal["daily", "weekly", "monthly", "quarterly", "half_year", "yearly"]
    ] = None


class UpdateBudgetData(CreateBudgetData):
    """Partial budget update; every field is optional."""

    name: Optional[str] = None


# ---------------------------------------------------------------------------
# Piggy banks, recurring transactions and bills
# ---------------------------------------------------------------------------


class PiggyBankAttributes(FireflyModel):
    name: str
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    target_amount: Optional[str] = None
    current_amount: Optional[str] = None
    percentage: Optional[float] = None
    left_to_save: Optional[str] = None
    save_per_month: Optional[str] = None
    start_date: Optional[str] = None
    target_date: Optional[str] = None
    order: Optional[int] = None
    active: bool = True
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PiggyBank(FireflyModel):
    id: str
    type: str = "piggy_banks"
    attributes: PiggyBankAttributes


class RecurrenceTransactionInfo(FireflyModel):
    description: str
    amount: str
    foreign_amount: Optional[str] = None
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    foreign_currency_id: Optional[str] = None
    foreign_currency_code: Optional[str] = None
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    destination_id: Optional[str] = None
    destination_name: Optional[str] = None
    budget_id: Optional[str] = None
    budget_name: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    tags: Optional[list[str]] = None


class RecurrenceRepetition(FireflyModel):
    id: Optional[str] = None
    type: str
    moment: Optional[str] = None
    skip: int = 0
    weekend: int = 1
    occurrences: list[str] = Field(default_factory=list)


class RecurringAttributes(FireflyModel):
    title: str
    description: Optional[str] = None
    first_date: str
    latest_date: Optional[str] = None
    repeat_until: Optional[str] = None
    nr_of_repetitions: Optional[int] = None
    apply_rules: bool = True
    active: bool = True
    type: str
    transactions: list[RecurrenceTransactionInfo] = Field(default_factory=list)
    repetitions: list[RecurrenceRepetition] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RecurringTransaction(FireflyModel):
    id: str
    type: str = "recurrences"
    attributes: RecurringAttributes


class BillPaidDate(FireflyModel):
    transaction_group_id: Optional[str] = None
    transaction_journal_id: Optional[str] = None
    date: Optional[str] = None
    amount: Optional[str] = None
    currency_code: Optional[str] = None


class BillAttributes(FireflyModel):
    name: str
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    currency_decimal_places: Optional[int] = None
    amount_min: Optional[str] = None
    amount_max: Optional[str] = None
    amount_avg: Optional[str] = None
    date: Optional[str] = None
    end_date: Optional[str] = None
    extension_date: Optional[str] = None
    repeat_freq: Optional[str] = None
    skip: int = 0
    active: bool = True
    order: Optional[int] = None
    notes: Optional[str] = None
    object_group_id: Optional[str] = None
    object_group_title: Optional[str] = None
    paid_dates: list[BillPaidDate] = Field(default_factory=list)
    pay_dates: list[str] = Field(default_factory=list)
    next_expected_match: Optional[str] = None
    next_expected_match_diff: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Bill(FireflyModel):
    """A subscription (called "bill" by older server versions)."""

    id: str
    type: str = "bills"
    attributes: BillAttributes


# ---------------------------------------------------------------------------
# Flat records: autocomplete, insight, about
# ---------------------------------------------------------------------------


class Currency(FireflyModel):
    id: str
    name: str
    code: str
    symbol: str
    decimal_places: int = 2


class ExpenseSummary(FireflyModel):
    """Total spent towards one expense account within a date range."""

    id: str
    name: str
    difference: str
    difference_float: float
    currency_id: Optional[str] = None
    currency_code: Optional[str] = None


class AutocompleteCategory(FireflyModel):
    id: str
    name: str


class AutocompleteSubscription(FireflyModel):
    id: str
    name: str
    active: Optional[bool] = None


class ServerVersion(FireflyModel):
    version: str
    api_version: str
    os: Optional[str] = None
    php_version: Optional[str] = None


class AboutInfo(FireflyModel):
    """Response of ``GET about``, used to validate a connection."""

    data: ServerVersion


# ---------------------------------------------------------------------------
# Local-only records
# ---------------------------------------------------------------------------


class PendingTransaction(BaseModel):
    """A transaction recorded while offline, not yet sent to the server.

    ``id`` is generated locally and doubles as an idempotency key should
    the queue ever be replayed.
    """

    id: str
    data: CreateTransactionData
    queued_at: int
