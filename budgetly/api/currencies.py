"""Currency lookup."""

from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import Currency


async def get_user_currencies(transport: Transport) -> list[Currency]:
    """Get the currencies enabled for the user (bare list, no envelope)."""
    body = await transport.get("autocomplete/currencies")
    return parse_response(list[Currency], body)
