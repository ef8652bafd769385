"""Bulk-load helper that fills an index with generated user documents."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from docseek.models import Document
from docseek.search.client import SearchEngineClient

logger = logging.getLogger(__name__)


async def seed_documents(
    client: SearchEngineClient,
    *,
    count: int,
    index: Optional[str] = None,
    prefix: str = "user",
    now: Optional[datetime] = None,
) -> int:
    """Store `count` documents with ids 0..count-1 and return how many were stored.

    All documents share one creation timestamp. The first failing store
    propagates; documents stored before it stay in the index.
    """
    created_at = now or datetime.now(timezone.utc)
    for i in range(count):
        doc = Document(id=i, created_at=created_at, username=f"{prefix} {i}")
        await client.store(doc, index=index)
    logger.info("Seeded documents", extra={"count": count, "index": client.resolve_index(index)})
    return count
