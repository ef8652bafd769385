"""Search tools for FastMCP.

Expose page loads, both pagination strategies, and the store/index helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from fastmcp import FastMCP

from docseek.models import Document, Page, RetrievalResult
from docseek.search.client import SearchEngineClient
from docseek.search.pagination import paginate_cursor, paginate_offset


def _serialize_page(page: Page) -> Dict[str, Any]:
    return {
        "documents": [d.to_source() for d in page.documents],
        "total": page.total,
        "cursor": page.cursor,
        "truncated": page.truncated,
        "attempted": page.attempted,
        "succeeded": page.succeeded,
    }


def _serialize_result(result: RetrievalResult) -> Dict[str, Any]:
    return {
        "documents": [d.to_source() for d in result.documents],
        "count": len(result.documents),
        "pages": result.pages,
        "total": result.total,
        "last_cursor": result.last_cursor,
        "truncated_pages": result.truncated_pages,
    }


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register search tools on the given FastMCP instance.

    Uses the shared client at state.search (built from state.settings.search).
    """

    def _client(state_obj: Any) -> SearchEngineClient:
        client = getattr(state_obj, "search", None)
        if client is None:
            raise RuntimeError(
                "Search engine is not configured. Set DOCSEEK_SEARCH__HOSTS and "
                "DOCSEEK_SEARCH__DEFAULT_INDEX."
            )
        return client

    @mcp.tool
    async def search_load_page(
        index: Optional[str] = None,
        offset: int = 0,
        size: int = 10,
        cursor: Optional[Union[int, float, str]] = None,
    ) -> Dict[str, Any]:
        """Load one page of documents sorted by ID.

        Parameters
        ----------
        index: str | None
            Index name; the configured default index when omitted.
        offset: int
            Number of documents to skip. Ignored when `cursor` is given.
        size: int
            Page size.
        cursor: int | float | str | None
            Sort key of the last document of the previous page.
        """
        client = _client(get_state())
        page = await client.load(index=index, offset=offset, size=size, cursor=cursor)
        return _serialize_page(page)

    @mcp.tool
    async def search_paginate_offset(
        index: Optional[str] = None,
        page_size: int = 10,
        bound: int = 100,
        stop_when_exhausted: bool = False,
    ) -> Dict[str, Any]:
        """Collect up to `bound` documents with offset pagination."""
        client = _client(get_state())
        result = await paginate_offset(
            client,
            index=index,
            page_size=page_size,
            bound=bound,
            stop_when_exhausted=stop_when_exhausted,
        )
        return _serialize_result(result)

    @mcp.tool
    async def search_paginate_cursor(
        index: Optional[str] = None,
        page_size: int = 10,
        iterations: int = 10,
        stop_when_exhausted: bool = False,
    ) -> Dict[str, Any]:
        """Collect documents over `iterations` search-after requests."""
        client = _client(get_state())
        result = await paginate_cursor(
            client,
            index=index,
            page_size=page_size,
            iterations=iterations,
            stop_when_exhausted=stop_when_exhausted,
        )
        return _serialize_result(result)

    @mcp.tool
    async def search_store_document(
        doc_id: int,
        username: str,
        created_at: Optional[str] = None,
        index: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Store one document. `created_at` is RFC3339; defaults to now (UTC)."""
        client = _client(get_state())
        when = datetime.fromisoformat(created_at) if created_at else datetime.now(timezone.utc)
        doc = Document(id=doc_id, created_at=when, username=username)
        await client.store(doc, index=index)
        return {"ok": True, "index": client.resolve_index(index), "document": doc.to_source()}

    @mcp.tool
    async def search_create_index(
        index: Optional[str] = None, mapping_path: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create an index from a JSON mapping file (configured path by default)."""
        client = _client(get_state())
        await client.create_index(index, mapping_path)
        return {"ok": True, "index": client.resolve_index(index)}
