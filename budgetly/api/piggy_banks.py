"""Piggy bank endpoints."""

from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import Envelope, PiggyBank


async def get_piggy_banks(transport: Transport, page: int = 1) -> Envelope[list[PiggyBank]]:
    body = await transport.get("piggy-banks", params={"page": page})
    return parse_response(Envelope[list[PiggyBank]], body)


async def get_piggy_bank(transport: Transport, id: str) -> Envelope[PiggyBank]:
    body = await transport.get(f"piggy-banks/{id}")
    return parse_response(Envelope[PiggyBank], body)
