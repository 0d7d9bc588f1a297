"""Account endpoints."""

from typing import Optional

from budgetly.api.pagination import fetch_all_pages
from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import (
    Account,
    AccountOverview,
    AccountStoreRequest,
    AccountUpdateRequest,
    Envelope,
    TransactionGroup,
)


async def get_accounts(
    transport: Transport, page: int = 1, type: str = "all"
) -> Envelope[list[Account]]:
    """Get one page of accounts, optionally filtered by account type."""
    body = await transport.get("accounts", params={"page": page, "type": type})
    return parse_response(Envelope[list[Account]], body)


async def get_all_accounts(transport: Transport, type: str = "all") -> Envelope[list[Account]]:
    """Get every account across all pages."""
    return await fetch_all_pages(get_accounts, transport, type=type)


async def get_account(transport: Transport, id: str) -> Envelope[Account]:
    body = await transport.get(f"accounts/{id}")
    return parse_response(Envelope[Account], body)


async def create_account(transport: Transport, body: AccountStoreRequest) -> Envelope[Account]:
    response = await transport.post("accounts", json=body.to_payload())
    return parse_response(Envelope[Account], response)


async def update_account(
    transport: Transport, id: str, body: AccountUpdateRequest
) -> Envelope[Account]:
    response = await transport.put(f"accounts/{id}", json=body.to_payload())
    return parse_response(Envelope[Account], response)


async def delete_account(transport: Transport, id: str) -> None:
    await transport.delete(f"accounts/{id}")


async def get_account_transactions(
    transport: Transport,
    account_id: str,
    page: int = 1,
    start: Optional[str] = None,
    end: Optional[str] = None,
    type: Optional[str] = None,
    limit: Optional[int] = None,
) -> Envelope[list[TransactionGroup]]:
    """Get one page of transaction groups touching an account.

    Args:
        transport: Transport to request through
        account_id: Account ID
        page: Page number (1-based)
        start: Optional start date (YYYY-MM-DD)
        end: Optional end date (YYYY-MM-DD)
        type: Optional transaction type filter
        limit: Optional page size

    Returns:
        Envelope with one page of transaction groups
    """
    body = await transport.get(
        f"accounts/{account_id}/transactions",
        params={"page": page, "start": start, "end": end, "type": type, "limit": limit},
    )
    return parse_response(Envelope[list[TransactionGroup]], body)


async def get_all_account_transactions(
    transport: Transport,
    account_id: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    type: Optional[str] = None,
) -> Envelope[list[TransactionGroup]]:
    return await fetch_all_pages(
        get_account_transactions, transport, account_id, start=start, end=end, type=type
    )


async def get_account_overview(
    transport: Transport, start: str, end: str, preselected: str = "assets"
) -> list[AccountOverview]:
    """Get balance-over-time series for the account overview chart."""
    body = await transport.get(
        "chart/account/overview",
        params={"start": start, "end": end, "preselected": preselected},
    )
    return parse_response(list[AccountOverview], body)
