"""Multi-page retrieval drivers.

Two strategies are supported:

- offset: skip-and-take with a fixed page size, stepping the offset until a
  caller-supplied record bound is covered;
- cursor: search-after, threading each page's last sort key into the next
  request for a caller-supplied number of iterations.

Both run a fixed number of requests by default; pass
``stop_when_exhausted=True`` to stop on the first empty page or once the
engine's reported total has been consumed. Any failing request aborts the
whole retrieval with a `PaginationError` that keeps what was accumulated.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional

from docseek.exceptions import PaginationError, RetrievalTimeoutError, SearchError
from docseek.models import Page, RetrievalResult, SortValue
from docseek.search.client import SearchEngineClient

logger = logging.getLogger(__name__)


async def iter_offset_pages(
    client: SearchEngineClient,
    *,
    index: Optional[str] = None,
    page_size: int = 10,
    bound: int = 100,
    start: int = 0,
    stop_when_exhausted: bool = False,
) -> AsyncIterator[Page]:
    """Yield pages at offsets start, start+page_size, ... below start+bound."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    for offset in range(start, start + bound, page_size):
        page = await client.load(index=index, offset=offset, size=page_size)
        yield page
        if stop_when_exhausted and (page.is_empty or offset + page_size >= page.total):
            return


async def iter_cursor_pages(
    client: SearchEngineClient,
    *,
    index: Optional[str] = None,
    page_size: int = 10,
    iterations: int = 10,
    stop_when_exhausted: bool = False,
) -> AsyncIterator[Page]:
    """Yield up to `iterations` pages, each resuming after the previous one."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    cursor: Optional[SortValue] = None
    consumed = 0
    for i in range(iterations):
        page = await client.load(index=index, offset=0, size=page_size, cursor=cursor)
        yield page
        consumed += page.attempted
        # An empty page has no cursor; keep the last one rather than restarting
        if page.cursor is not None:
            cursor = page.cursor
        logger.debug("Cursor page fetched", extra={"iteration": i, "cursor": cursor})
        if stop_when_exhausted and (page.is_empty or consumed >= page.total):
            return


async def _accumulate(
    pages: AsyncIterator[Page],
    *,
    strategy: str,
    index: Optional[str],
    deadline: Optional[float],
) -> RetrievalResult:
    result = RetrievalResult()
    try:
        async with asyncio.timeout(deadline):
            async for page in pages:
                result.add(page)
    except TimeoutError as exc:
        raise RetrievalTimeoutError(
            f"{strategy} retrieval exceeded its {deadline}s deadline "
            f"after {result.pages} page(s)",
            strategy=strategy,
            iteration=result.pages,
            index=index,
            partial=result,
        ) from exc
    except SearchError as exc:
        raise PaginationError(
            f"{strategy} retrieval failed on request {result.pages}: {exc}",
            strategy=strategy,
            iteration=result.pages,
            index=exc.index or index,
            partial=result,
        ) from exc
    return result


async def paginate_offset(
    client: SearchEngineClient,
    *,
    index: Optional[str] = None,
    page_size: int = 10,
    bound: int = 100,
    start: int = 0,
    stop_when_exhausted: bool = False,
    deadline: Optional[float] = None,
) -> RetrievalResult:
    """Collect documents page by page using offset pagination.

    Issues ceil(bound / page_size) requests unless `stop_when_exhausted`
    ends the loop early. `deadline` (seconds) bounds the whole retrieval.
    """
    pages = iter_offset_pages(
        client,
        index=index,
        page_size=page_size,
        bound=bound,
        start=start,
        stop_when_exhausted=stop_when_exhausted,
    )
    return await _accumulate(pages, strategy="offset", index=index, deadline=deadline)


async def paginate_cursor(
    client: SearchEngineClient,
    *,
    index: Optional[str] = None,
    page_size: int = 10,
    iterations: int = 10,
    stop_when_exhausted: bool = False,
    deadline: Optional[float] = None,
) -> RetrievalResult:
    """Collect documents page by page using search-after cursors.

    The first request starts from the beginning; each later request resumes
    after the previous page's cursor.
    """
    pages = iter_cursor_pages(
        client,
        index=index,
        page_size=page_size,
        iterations=iterations,
        stop_when_exhausted=stop_when_exhausted,
    )
    return await _accumulate(pages, strategy="cursor", index=index, deadline=deadline)
