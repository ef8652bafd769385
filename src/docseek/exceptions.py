"""Custom exception hierarchy for docseek.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from docseek.models import RetrievalResult


class DocseekError(Exception):
    """Base class for all docseek exceptions."""


class ConfigError(DocseekError):
    """Raised when configuration loading or validation fails."""


class SearchError(DocseekError):
    """Raised for search engine request issues.

    Carries the target index and the query body (when there is one) so the
    failing call can be diagnosed from the exception alone.
    """

    def __init__(
        self,
        message: str,
        *,
        index: Optional[str] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.index = index
        self.query = query


class SearchTransportError(SearchError):
    """Raised when the engine cannot be reached (connection, TLS, timeout)."""


class EngineResponseError(SearchError):
    """Raised when the engine answers with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        detail: Any = None,
        index: Optional[str] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, index=index, query=query)
        self.status = status
        self.detail = detail


class ResponseDecodeError(SearchError):
    """Raised when a response body does not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        index: Optional[str] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, index=index, query=query)
        self.status = status


class PaginationError(DocseekError):
    """Raised when a page fetch fails during a multi-page retrieval.

    `partial` holds everything accumulated before the failing iteration.
    """

    def __init__(
        self,
        message: str,
        *,
        strategy: str,
        iteration: int,
        index: Optional[str],
        partial: "RetrievalResult",
    ) -> None:
        super().__init__(message)
        self.strategy = strategy
        self.iteration = iteration
        self.index = index
        self.partial = partial


class RetrievalTimeoutError(PaginationError):
    """Raised when a retrieval exceeds its overall deadline."""
