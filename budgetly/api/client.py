"""Firefly III API client handle.

``ApiClient`` holds the one live ``Transport`` built from the current
credentials. It is an ordinary object owned by the application context and
passed to whoever needs it; there is no module-level instance.
"""

import logging
from typing import Optional

import httpx

from budgetly.api import (
    accounts,
    autocomplete,
    budgets,
    currencies,
    expenses,
    piggy_banks,
    recurring,
    transactions,
)
from budgetly.api.errors import NotInitializedError
from budgetly.api.transport import DEFAULT_TIMEOUT_SECONDS, Transport, parse_response
from budgetly.domain.models import (
    AboutInfo,
    AccountStoreRequest,
    AccountUpdateRequest,
    CreateBudgetData,
    CreateTransactionData,
    Credentials,
    UpdateBudgetData,
)

logger = logging.getLogger(__name__)


async def get_about(transport: Transport) -> AboutInfo:
    """Get server version information."""
    body = await transport.get("about")
    return parse_response(AboutInfo, body)


class ApiClient:
    """Holder for the live transport with per-resource convenience methods.

    Every method goes through ``ensure_initialized()``, so calling one
    before ``initialize()`` raises ``NotInitializedError`` without any
    network traffic.

    Example:
        >>> client = ApiClient()
        >>> client.initialize(credentials)
        >>> about = await client.validate_connection()
        >>> accounts = await client.get_all_accounts()
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize an empty client handle.

        Args:
            timeout: Request timeout in seconds for transports built later
            http_transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout
        self._http_transport = http_transport
        self._transport: Optional[Transport] = None
        # Superseded by initialize(); closed in close()
        self._retired: list[Transport] = []

    @property
    def is_initialized(self) -> bool:
        return self._transport is not None

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    def initialize(self, credentials: Credentials) -> Transport:
        """Build a transport for the given credentials and make it live.

        The previous transport is not closed yet: requests already holding
        it finish against the old credentials. It is closed by ``close()``.

        Args:
            credentials: Endpoint URL and access token

        Returns:
            The new live transport
        """
        transport = Transport(
            credentials, timeout=self._timeout, http_transport=self._http_transport
        )
        if self._transport is not None:
            self._retired.append(self._transport)
        self._transport = transport
        logger.info(f"API client initialized for {transport.base_url}")
        return transport

    async def restore(self, previous: Optional[Transport]) -> None:
        """Make ``previous`` live again and close the current transport.

        Used to undo an ``initialize()`` whose credentials were rejected.
        With ``previous`` None this is the same as ``reset()``.
        """
        rejected, self._transport = self._transport, previous
        if previous is not None and previous in self._retired:
            self._retired.remove(previous)
        if rejected is not None and rejected is not previous:
            await rejected.aclose()

    def ensure_initialized(self) -> Transport:
        """Get the live transport.

        Raises:
            NotInitializedError: If ``initialize()`` has not been called
        """
        if self._transport is None:
            raise NotInitializedError()
        return self._transport

    async def reset(self) -> None:
        """Drop and close the live transport (used on sign-out)."""
        transport, self._transport = self._transport, None
        if transport is not None:
            await transport.aclose()

    async def close(self) -> None:
        """Close every transport and leave the client uninitialized."""
        transports = self._retired
        if self._transport is not None:
            transports = transports + [self._transport]
        self._transport = None
        self._retired = []
        for transport in transports:
            await transport.aclose()

    async def validate_connection(self) -> AboutInfo:
        return await get_about(self.ensure_initialized())

    # Accounts

    async def get_accounts(self, page: int = 1, type: str = "all"):
        return await accounts.get_accounts(self.ensure_initialized(), page, type)

    async def get_all_accounts(self, type: str = "all"):
        return await accounts.get_all_accounts(self.ensure_initialized(), type)

    async def get_account(self, id: str):
        return await accounts.get_account(self.ensure_initialized(), id)

    async def create_account(self, body: AccountStoreRequest):
        return await accounts.create_account(self.ensure_initialized(), body)

    async def update_account(self, id: str, body: AccountUpdateRequest):
        return await accounts.update_account(self.ensure_initialized(), id, body)

    async def delete_account(self, id: str) -> None:
        await accounts.delete_account(self.ensure_initialized(), id)

    async def get_account_transactions(
        self,
        account_id: str,
        page: int = 1,
        start: Optional[str] = None,
        end: Optional[str] = None,
        type: Optional[str] = None,
    ):
        return await accounts.get_account_transactions(
            self.ensure_initialized(), account_id, page, start, end, type
        )

    async def get_all_account_transactions(
        self,
        account_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
        type: Optional[str] = None,
    ):
        return await accounts.get_all_account_transactions(
            self.ensure_initialized(), account_id, start, end, type
        )

    async def get_account_overview(self, start: str, end: str):
        return await accounts.get_account_overview(self.ensure_initialized(), start, end)

    # Transactions

    async def get_transactions(
        self,
        page: int = 1,
        start: Optional[str] = None,
        end: Optional[str] = None,
        type: Optional[str] = None,
    ):
        return await transactions.get_transactions(
            self.ensure_initialized(), page, start, end, type
        )

    async def get_all_transactions(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        type: Optional[str] = None,
    ):
        return await transactions.get_all_transactions(
            self.ensure_initialized(), start, end, type
        )

    async def get_transaction(self, id: str):
        return await transactions.get_transaction(self.ensure_initialized(), id)

    async def create_transaction(self, data: CreateTransactionData):
        return await transactions.create_transaction(self.ensure_initialized(), data)

    async def update_transaction(self, id: str, data: CreateTransactionData):
        return await transactions.update_transaction(self.ensure_initialized(), id, data)

    async def delete_transaction(self, id: str) -> None:
        await transactions.delete_transaction(self.ensure_initialized(), id)

    # Budgets

    async def get_budgets(
        self, page: int = 1, start: Optional[str] = None, end: Optional[str] = None
    ):
        return await budgets.get_budgets(self.ensure_initialized(), page, start, end)

    async def get_all_budgets(self, start: Optional[str] = None, end: Optional[str] = None):
        return await budgets.get_all_budgets(self.ensure_initialized(), start, end)

    async def get_budget(self, id: str):
        return await budgets.get_budget(self.ensure_initialized(), id)

    async def create_budget(self, data: CreateBudgetData):
        return await budgets.create_budget(self.ensure_initialized(), data)

    async def update_budget(self, id: str, data: UpdateBudgetData):
        return await budgets.update_budget(self.ensure_initialized(), id, data)

    async def delete_budget(self, id: str) -> None:
        await budgets.delete_budget(self.ensure_initialized(), id)

    async def get_budget_limits(self, start: str, end: str, page: int = 1):
        return await budgets.get_budget_limits(self.ensure_initialized(), start, end, page)

    async def get_all_budget_limits(self, start: str, end: str):
        return await budgets.get_all_budget_limits(self.ensure_initialized(), start, end)

    async def get_limits_for_budget(
        self, budget_id: str, start: Optional[str] = None, end: Optional[str] = None
    ):
        return await budgets.get_limits_for_budget(
            self.ensure_initialized(), budget_id, start, end
        )

    # Piggy banks

    async def get_piggy_banks(self, page: int = 1):
        return await piggy_banks.get_piggy_banks(self.ensure_initialized(), page)

    async def get_piggy_bank(self, id: str):
        return await piggy_banks.get_piggy_bank(self.ensure_initialized(), id)

    # Recurring

    async def get_recurring_transactions(self, page: int = 1):
        return await recurring.get_recurring_transactions(self.ensure_initialized(), page)

    async def get_recurring_transaction(self, id: str):
        return await recurring.get_recurring_transaction(self.ensure_initialized(), id)

    async def get_bills(self):
        return await recurring.get_bills(self.ensure_initialized())

    # Insight, currencies and autocomplete

    async def get_expenses_by_expense_account(self, start: str, end: str):
        return await expenses.get_expenses_by_expense_account(
            self.ensure_initialized(), start, end
        )

    async def get_user_currencies(self):
        return await currencies.get_user_currencies(self.ensure_initialized())

    async def get_autocomplete_categories(self):
        return await autocomplete.get_autocomplete_categories(self.ensure_initialized())

    async def get_autocomplete_subscriptions(self):
        return await autocomplete.get_autocomplete_subscriptions(self.ensure_initialized())
