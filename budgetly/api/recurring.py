"""Recurring transaction and subscription (bill) endpoints."""

from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import Bill, Envelope, RecurringTransaction


async def get_recurring_transactions(
    transport: Transport, page: int = 1
) -> Envelope[list[RecurringTransaction]]:
    body = await transport.get("recurring", params={"page": page})
    return parse_response(Envelope[list[RecurringTransaction]], body)


async def get_recurring_transaction(
    transport: Transport, id: str
) -> Envelope[RecurringTransaction]:
    body = await transport.get(f"recurring/{id}")
    return parse_response(Envelope[RecurringTransaction], body)


async def get_bills(transport: Transport) -> Envelope[list[Bill]]:
    """Get the first page of subscriptions."""
    body = await transport.get("bills")
    return parse_response(Envelope[list[Bill]], body)
