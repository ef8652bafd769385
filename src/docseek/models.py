"""Typed data model for documents and result pages.

`Document` is the persisted/wire record; its JSON keys are case-sensitive
(`ID`, `CreatedAt`, `Username`). `Page` is the transient result of one search
call and `RetrievalResult` is what the pagination drivers accumulate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

# A sort key as returned by the engine in `hits.hits[].sort`.
SortValue = Union[int, float, str]


class Document(BaseModel):
    """A stored user record.

    Validation is strict, so wire values are never coerced into shape.
    `CreatedAt` must be an RFC3339 timestamp carrying a UTC offset.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", strict=True)

    id: int = Field(alias="ID")
    created_at: AwareDatetime = Field(alias="CreatedAt")
    username: str = Field(alias="Username")

    def to_source(self) -> Dict[str, Any]:
        """Return the JSON-ready `_source` form of this document."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(slots=True)
class Page:
    """One search response decoded into documents.

    Attributes
    ----------
    documents: list[Document]
        Decoded documents in engine order.
    total: int
        Exact number of matches reported by the engine; may exceed the page size.
    cursor: SortValue | None
        Sort key of the last hit, or None when the page has no hits.
    truncated: bool
        True when a hit failed to decode and the remaining hits were skipped.
    attempted: int
        Number of hits in the response.
    succeeded: int
        Number of hits decoded into documents.
    """

    documents: List[Document] = field(default_factory=list)
    total: int = 0
    cursor: Optional[SortValue] = None
    truncated: bool = False
    attempted: int = 0
    succeeded: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the response carried no hits at all."""
        return self.attempted == 0


@dataclass(slots=True)
class RetrievalResult:
    """Documents accumulated across pages, in fetch order."""

    documents: List[Document] = field(default_factory=list)
    pages: int = 0
    total: int = 0
    last_cursor: Optional[SortValue] = None
    truncated_pages: int = 0

    def add(self, page: Page) -> None:
        self.documents.extend(page.documents)
        self.pages += 1
        self.total = page.total
        if page.cursor is not None:
            self.last_cursor = page.cursor
        if page.truncated:
            self.truncated_pages += 1
