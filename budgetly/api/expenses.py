"""Expense insight endpoints."""

from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import ExpenseSummary


async def get_expenses_by_expense_account(
    transport: Transport, start: str, end: str
) -> list[ExpenseSummary]:
    """Get total spent per expense account between two dates (inclusive).

    Args:
        transport: Transport to request through
        start: Start date (YYYY-MM-DD)
        end: End date (YYYY-MM-DD)

    Returns:
        One summary per expense account and currency
    """
    body = await transport.get("insight/expense/expense", params={"start": start, "end": end})
    return parse_response(list[ExpenseSummary], body)
