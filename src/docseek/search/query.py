"""Search request construction.

Every request is a match-all query with an explicit ascending sort on the
identifier field, so the engine returns a total, stable order that a
search-after cursor can resume from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from docseek.models import SortValue


@dataclass(slots=True)
class SearchRequest:
    """A search body plus the URL paging parameters that go with it."""

    body: Dict[str, Any]
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def uses_cursor(self) -> bool:
        return "search_after" in self.body


def build_query(cursor: Optional[SortValue] = None, *, sort_field: str = "ID") -> Dict[str, Any]:
    """Return the match-all query body, resuming after `cursor` when given."""
    query: Dict[str, Any] = {
        "query": {"match_all": {}},
        "sort": [{sort_field: {"order": "asc"}}],
    }
    if cursor is not None:
        query["search_after"] = [cursor]
    return query


def build_search_request(
    offset: int,
    size: int,
    cursor: Optional[SortValue] = None,
    *,
    sort_field: str = "ID",
) -> SearchRequest:
    """Build a request for one page.

    Without a cursor the page starts at `offset` (skip-and-take). With a cursor
    the page starts right after the hit whose sort key equals it, and `offset`
    is ignored. A cursor of 0 is a real sort key, not "unset".
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    if cursor is None and offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")

    body = build_query(cursor, sort_field=sort_field)
    if cursor is None:
        params: Dict[str, Any] = {"from": offset, "size": size}
    else:
        params = {"size": size}
    return SearchRequest(body=body, params=params)
