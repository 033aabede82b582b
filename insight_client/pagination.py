"""
Pagination engine for the address transaction listing.

Requests windows [from, from + page_size) until the accumulated count reaches
the total the server declares on each page. The optional page cap bounds the
loop against a server that never converges.
"""

from __future__ import annotations

from typing import Awaitable, Callable

import structlog

from insight_client.client_logging import get_logger
from insight_client.core.exceptions import PaginationLimitExceeded, PartialResultError
from insight_client.models import Transaction, TransactionList

DEFAULT_PAGE_SIZE = 50

FetchPage = Callable[[int, int], Awaitable[TransactionList]]


async def paginate(
    fetch_page: FetchPage,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int | None = None,
    logger: structlog.BoundLogger | None = None,
) -> list[Transaction]:
    """
    Accumulate every page into one list, in page order.

    Args:
        fetch_page: Coroutine function taking (from, to) and returning one page.
        page_size: Window width.
        max_pages: Stop with an error after this many pages; None means no cap.
        logger: Bound logger of the owning client.

    Raises:
        PartialResultError: a page failed, the server stopped returning items
            before its declared total, or max_pages was hit. ``partial`` holds
            the transactions fetched so far.
    """
    log = logger or get_logger(__name__)
    txs: list[Transaction] = []
    start = 0
    pages = 0
    while True:
        if max_pages is not None and pages >= max_pages:
            err = PaginationLimitExceeded(
                f"stopped after {pages} pages with {len(txs)} items fetched"
            )
            log.warning("pagination_limit_reached", pages=pages, fetched=len(txs))
            raise PartialResultError(txs, err) from err
        try:
            page = await fetch_page(start, start + page_size)
        except Exception as e:
            log.warning(
                "pagination_page_failed",
                page_from=start,
                fetched=len(txs),
                error=str(e),
            )
            raise PartialResultError(txs, e) from e
        pages += 1
        txs.extend(page.items)
        if len(txs) >= page.total_items:
            break
        if not page.items:
            err = PaginationLimitExceeded(
                f"empty page at {start} with {len(txs)} of {page.total_items} items fetched"
            )
            log.warning(
                "pagination_empty_page",
                page_from=start,
                fetched=len(txs),
                total_items=page.total_items,
            )
            raise PartialResultError(txs, err) from err
        start += page_size
    log.debug("pagination_complete", pages=pages, fetched=len(txs))
    return txs
