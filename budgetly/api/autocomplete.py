"""Autocomplete endpoints used to fill pickers in forms."""

from budgetly.api.transport import Transport, parse_response
from budgetly.domain.models import AutocompleteCategory, AutocompleteSubscription


async def get_autocomplete_categories(transport: Transport) -> list[AutocompleteCategory]:
    body = await transport.get("autocomplete/categories")
    return parse_response(list[AutocompleteCategory], body)


async def get_autocomplete_subscriptions(transport: Transport) -> list[AutocompleteSubscription]:
    body = await transport.get("autocomplete/subscriptions")
    return parse_response(list[AutocompleteSubscription], body)
