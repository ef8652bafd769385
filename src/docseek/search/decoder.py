"""Decode raw search responses into typed pages.

Decoding runs in two phases. The envelope is first parsed into a plain JSON
tree, whose required paths (`hits.total.value`, `hits.hits`, the last hit's
`sort`) are checked explicitly; a missing path is a `ResponseDecodeError`.
Each hit's `_source` is then re-encoded to bytes and validated into a
`Document`. The first hit that fails validation ends the page: the documents
decoded so far are returned with `truncated=True` instead of raising, so one
malformed record never loses the rest of an otherwise good page.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from docseek.exceptions import ResponseDecodeError
from docseek.models import Document, Page, SortValue

logger = logging.getLogger(__name__)


def _parse_envelope(raw: bytes | str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ResponseDecodeError(f"response body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ResponseDecodeError(
            f"response body must be a JSON object, got {type(data).__name__}"
        )
    return data


def _total_hits(envelope: Dict[str, Any]) -> int:
    hits = envelope.get("hits")
    total = hits.get("total") if isinstance(hits, dict) else None
    value = total.get("value") if isinstance(total, dict) else None
    # bool is an int subclass; a boolean total is still a malformed envelope
    if not isinstance(value, int) or isinstance(value, bool):
        raise ResponseDecodeError("response has no integer 'hits.total.value'")
    return value


def _hit_list(envelope: Dict[str, Any]) -> List[Any]:
    hits = envelope["hits"].get("hits")
    if not isinstance(hits, list):
        raise ResponseDecodeError("response has no 'hits.hits' array")
    return hits


def _sort_key(hit: Any, position: int) -> SortValue:
    sort = hit.get("sort") if isinstance(hit, dict) else None
    if not isinstance(sort, list) or not sort:
        raise ResponseDecodeError(f"hit {position} has no 'sort' values")
    value = sort[0]
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ResponseDecodeError(f"hit {position} has an unusable sort value: {value!r}")
    return value


def decode_document(hit: Any) -> Document:
    """Project one hit's `_source` into a `Document`.

    Raises `ValueError` (pydantic's `ValidationError` included) when the hit
    cannot be decoded.
    """
    source = hit.get("_source") if isinstance(hit, dict) else None
    if not isinstance(source, dict):
        raise ValueError("hit has no '_source' object")
    # The tree node is re-encoded so pydantic validates the exact wire form
    body = json.dumps(source).encode("utf-8")
    return Document.model_validate_json(body)


def decode_page(raw: bytes | str) -> Page:
    """Decode a successful search response body into a `Page`."""
    envelope = _parse_envelope(raw)
    total = _total_hits(envelope)
    if total == 0:
        return Page()

    hits = _hit_list(envelope)
    if not hits:
        # Offset past the last match
        return Page(total=total)

    cursor: Optional[SortValue] = _sort_key(hits[-1], len(hits) - 1)
    docs: List[Document] = []
    truncated = False
    for position, hit in enumerate(hits):
        try:
            docs.append(decode_document(hit))
        except (ValidationError, ValueError) as exc:
            logger.error(
                "Failed to decode search hit; returning partial page",
                extra={
                    "position": position,
                    "hit": hit,
                    "decoded": len(docs),
                    "attempted": len(hits),
                    "error": str(exc),
                },
            )
            truncated = True
            break

    return Page(
        documents=docs,
        total=total,
        cursor=cursor,
        truncated=truncated,
        attempted=len(hits),
        succeeded=len(docs),
    )


def decode_error_body(raw: bytes | str) -> Any:
    """Best-effort parse of an engine error body.

    Returns the engine's `error` member when present, else the whole body.
    Raises `ValueError` when the body is not JSON.
    """
    data = json.loads(raw)
    if isinstance(data, dict) and "error" in data:
        return data["error"]
    return data
