"""Full-collection aggregation over paginated endpoints."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from budgetly.api.transport import Transport
from budgetly.domain.models import Envelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[..., Awaitable[Envelope[list[T]]]]


async def fetch_all_pages(
    fetch_page: PageFetcher,
    transport: Transport,
    *args: Any,
    **filters: Any,
) -> Envelope[list[T]]:
    """Fetch every page of a paginated collection.

    Page 1 is requested first to learn ``total_pages``; the remaining pages
    are then requested concurrently and their data appended in page order,
    regardless of which request completes first.

    The returned envelope reuses page 1's ``meta``, so its pagination counts
    describe the first request only, not the merged list.

    Args:
        fetch_page: Single-page request function taking
            ``(transport, *args, page=..., **filters)``
        transport: Transport to request through
        *args: Positional parameters forwarded to ``fetch_page``
        **filters: Keyword filters forwarded to ``fetch_page``

    Returns:
        Envelope holding the full collection

    Raises:
        ApiError: The error of the first page request that failed. No
            partial result is returned and outstanding page requests are
            cancelled.
    """
    first = await fetch_page(transport, *args, page=1, **filters)
    total_pages = first.total_pages
    if total_pages <= 1:
        return first

    tasks = [
        asyncio.ensure_future(fetch_page(transport, *args, page=page, **filters))
        for page in range(2, total_pages + 1)
    ]
    try:
        remaining = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # Let cancelled tasks settle so none is left un-awaited
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    items = list(first.data)
    for page in remaining:
        items.extend(page.data)

    logger.debug(f"Aggregated {total_pages} pages into {len(items)} items")
    return first.model_copy(update={"data": items})
