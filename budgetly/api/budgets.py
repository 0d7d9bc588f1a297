"""Budget and budget-limit endpoints."""

from typing import Optional

from budgetly.api.pagination import fetch_all_pages
from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import (
    Budget,
    BudgetLimit,
    CreateBudgetData,
    Envelope,
    UpdateBudgetData,
)


async def get_budgets(
    transport: Transport,
    page: int = 1,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Envelope[list[Budget]]:
    """Get one page of budgets.

    When ``start`` and ``end`` are given the server includes the amount
    spent in that range in each budget's ``spent`` list.
    """
    body = await transport.get("budgets", params={"page": page, "start": start, "end": end})
    return parse_response(Envelope[list[Budget]], body)


async def get_all_budgets(
    transport: Transport, start: Optional[str] = None, end: Optional[str] = None
) -> Envelope[list[Budget]]:
    return await fetch_all_pages(get_budgets, transport, start=start, end=end)


async def get_budget(transport: Transport, id: str) -> Envelope[Budget]:
    body = await transport.get(f"budgets/{id}")
    return parse_response(Envelope[Budget], body)


async def create_budget(transport: Transport, data: CreateBudgetData) -> Envelope[Budget]:
    body = await transport.post("budgets", json=data.to_payload())
    return parse_response(Envelope[Budget], body)


async def update_budget(transport: Transport, id: str, data: UpdateBudgetData) -> Envelope[Budget]:
    body = await transport.put(f"budgets/{id}", json=data.to_payload())
    return parse_response(Envelope[Budget], body)


async def delete_budget(transport: Transport, id: str) -> None:
    await transport.delete(f"budgets/{id}")


async def get_budget_limits(
    transport: Transport, start: str, end: str, page: int = 1
) -> Envelope[list[BudgetLimit]]:
    """Get one page of budget limits overlapping a date range.

    The owning budgets come back in the envelope's ``included`` list.
    """
    body = await transport.get("budget-limits", params={"start": start, "end": end, "page": page})
    return parse_response(Envelope[list[BudgetLimit]], body)


async def get_all_budget_limits(
    transport: Transport, start: str, end: str
) -> Envelope[list[BudgetLimit]]:
    return await fetch_all_pages(get_budget_limits, transport, start=start, end=end)


async def get_limits_for_budget(
    transport: Transport,
    budget_id: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Envelope[list[BudgetLimit]]:
    body = await transport.get(
        f"budgets/{budget_id}/limits", params={"start": start, "end": end}
    )
    return parse_response(Envelope[list[BudgetLimit]], body)
