"""Search engine client over the Elasticsearch/OpenSearch REST API.

Uses a single shared `httpx.AsyncClient` for all calls; it is created lazily
and closed with `aclose()` (or by leaving `async with`). Nothing else is kept
between calls.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from docseek.config import SearchConfig
from docseek.exceptions import (
    ConfigError,
    EngineResponseError,
    ResponseDecodeError,
    SearchTransportError,
)
from docseek.models import Document, Page, SortValue
from docseek.search.decoder import decode_error_body, decode_page
from docseek.search.query import SearchRequest, build_search_request

logger = logging.getLogger(__name__)


def _quote_index(index: str) -> str:
    # Index names are a single path segment; "?", "#" and "/" must not leak out
    return quote(index, safe="")


class SearchEngineClient:
    """Client for one search cluster.

    Parameters
    ----------
    base_url:
        Cluster URL, e.g. http://localhost:9200 (may include a path prefix).
    default_index:
        Index used whenever a call passes an empty or missing index.
    username, password:
        Optional basic auth credentials.
    api_key:
        Optional API key, sent as `Authorization: ApiKey <key>`.
    timeout:
        Seconds. Bounds both the engine-side query and the HTTP round trip.
    track_total_hits:
        Ask the engine for exact totals instead of a lower bound.
    http_client:
        Pre-built client to share (tests pass one with a `MockTransport`).
        A client passed in here is not closed by `aclose()`.
    """

    def __init__(
        self,
        *,
        base_url: str,
        default_index: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        track_total_hits: bool = True,
        verify_ssl: bool = True,
        disable_compression: bool = True,
        sort_field: str = "ID",
        mapping_path: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.default_index = default_index
        self.username = username
        self.password = password
        self.api_key = api_key
        self.timeout = timeout
        self.track_total_hits = track_total_hits
        self.verify_ssl = verify_ssl
        self.disable_compression = disable_compression
        self.sort_field = sort_field
        self.mapping_path = mapping_path
        self._http = http_client
        self._owns_http = http_client is None

    @classmethod
    def from_settings(
        cls, cfg: SearchConfig, *, http_client: Optional[httpx.AsyncClient] = None
    ) -> "SearchEngineClient":
        if not cfg.hosts:
            raise ConfigError("No search hosts configured. Set DOCSEEK_SEARCH__HOSTS.")
        return cls(
            base_url=cfg.hosts[0],
            default_index=cfg.default_index,
            username=cfg.username,
            password=cfg.password,
            api_key=cfg.api_key,
            timeout=cfg.max_search_query_timeout,
            track_total_hits=cfg.track_total_hits,
            verify_ssl=cfg.verify_ssl,
            disable_compression=cfg.disable_compression,
            sort_field=cfg.sort_field,
            mapping_path=cfg.mapping_path,
            http_client=http_client,
        )

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            headers = {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
            if self.disable_compression:
                headers["Accept-Encoding"] = "identity"
            if self.api_key:
                headers["Authorization"] = f"ApiKey {self.api_key}"
            auth = (self.username, self.password or "") if self.username else None
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                auth=auth,
                timeout=self.timeout,
                verify=self.verify_ssl,
                headers=headers,
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "SearchEngineClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def resolve_index(self, index: Optional[str]) -> str:
        return index or self.default_index

    def _query_timeout(self) -> str:
        return f"{int(self.timeout * 1000)}ms"

    async def _send(
        self,
        method: str,
        path: str,
        *,
        index: str,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[bytes] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            resp = await self._client().request(
                method,
                path,
                content=body,
                params=params,
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as exc:
            # Connection and timeout failures, and bodies that fail content decoding
            raise SearchTransportError(
                f"{method} {path} failed: {exc}", index=index, query=query
            ) from exc

        if resp.is_success:
            return resp

        logger.error(
            "Search engine returned a failure response",
            extra={
                "method": method,
                "path": path,
                "index": index,
                "status": resp.status_code,
                "query": query,
            },
        )
        try:
            detail = decode_error_body(resp.content)
        except ValueError as exc:
            raise ResponseDecodeError(
                f"{method} {path}: status {resp.status_code} with unparseable error body: {exc}",
                status=resp.status_code,
                index=index,
                query=query,
            ) from exc
        raise EngineResponseError(
            f"{method} {path}: status {resp.status_code}: {detail}",
            status=resp.status_code,
            detail=detail,
            index=index,
            query=query,
        )

    async def search(self, request: SearchRequest, *, index: Optional[str] = None) -> bytes:
        """Execute `request` against `index` and return the raw response body.

        Offset requests carry `from`/`size`; cursor requests carry only `size`
        with `search_after` in the body.
        """
        target = self.resolve_index(index)
        params: Dict[str, Any] = dict(request.params)
        params["track_total_hits"] = "true" if self.track_total_hits else "false"
        params["timeout"] = self._query_timeout()
        resp = await self._send(
            "POST",
            f"/{_quote_index(target)}/_search",
            index=target,
            query=request.body,
            body=json.dumps(request.body).encode("utf-8"),
            params=params,
        )
        return resp.content

    async def load(
        self,
        *,
        index: Optional[str] = None,
        offset: int = 0,
        size: int = 10,
        cursor: Optional[SortValue] = None,
    ) -> Page:
        """Fetch and decode a single page."""
        request = build_search_request(offset, size, cursor, sort_field=self.sort_field)
        target = self.resolve_index(index)
        raw = await self.search(request, index=target)
        try:
            return decode_page(raw)
        except ResponseDecodeError as exc:
            exc.index = target
            exc.query = request.body
            raise

    async def create_index(
        self, index: Optional[str] = None, mapping_path: Optional[str] = None
    ) -> None:
        """Create `index` using the JSON mapping file at `mapping_path`."""
        target = self.resolve_index(index)
        path = mapping_path or self.mapping_path
        if not path:
            raise ConfigError("No mapping file configured. Set DOCSEEK_SEARCH__MAPPING_PATH.")
        try:
            mapping = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Could not read index mapping from {path}: {exc}") from exc

        await self._send(
            "PUT",
            f"/{_quote_index(target)}",
            index=target,
            query=mapping,
            body=json.dumps(mapping).encode("utf-8"),
        )
        logger.info("Created index", extra={"index": target, "mapping_path": path})

    async def store(self, document: Document, *, index: Optional[str] = None) -> None:
        """Index a single document; the engine assigns its id."""
        target = self.resolve_index(index)
        source = document.to_source()
        resp = await self._send(
            "POST",
            f"/{_quote_index(target)}/_doc",
            index=target,
            query=source,
            body=json.dumps(source).encode("utf-8"),
            params={"refresh": "true"},
        )
        logger.debug(
            "Stored document",
            extra={"index": target, "doc": source, "status_code": resp.status_code},
        )
