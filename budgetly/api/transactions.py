"""Transaction endpoints."""

from typing import Optional

from budgetly.api.pagination import fetch_all_pages
from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import CreateTransactionData, Envelope, TransactionGroup


async def get_transactions(
    transport: Transport,
    page: int = 1,
    start: Optional[str] = None,
    end: Optional[str] = None,
    type: Optional[str] = None,
    limit: Optional[int] = None,
) -> Envelope[list[TransactionGroup]]:
    """Get one page of transaction groups."""
    body = await transport.get(
        "transactions",
        params={"page": page, "start": start, "end": end, "type": type, "limit": limit},
    )
    return parse_response(Envelope[list[TransactionGroup]], body)


async def get_all_transactions(
    transport: Transport,
    start: Optional[str] = None,
    end: Optional[str] = None,
    type: Optional[str] = None,
) -> Envelope[list[TransactionGroup]]:
    """Get every transaction group in the range across all pages."""
    return await fetch_all_pages(get_transactions, transport, start=start, end=end, type=type)


async def get_transaction(transport: Transport, id: str) -> Envelope[TransactionGroup]:
    body = await transport.get(f"transactions/{id}")
    return parse_response(Envelope[TransactionGroup], body)


async def create_transaction(
    transport: Transport, data: CreateTransactionData
) -> Envelope[TransactionGroup]:
    """Create a transaction group.

    Returns the server's canonical representation; reconciling it into the
    store is up to the caller.
    """
    body = await transport.post("transactions", json=data.to_payload())
    return parse_response(Envelope[TransactionGroup], body)


async def update_transaction(
    transport: Transport, id: str, data: CreateTransactionData
) -> Envelope[TransactionGroup]:
    body = await transport.put(f"transactions/{id}", json=data.to_payload())
    return parse_response(Envelope[TransactionGroup], body)


async def delete_transaction(transport: Transport, id: str) -> None:
    await transport.delete(f"transactions/{id}")
