import json
from typing import Any, Dict, List, Optional, Union

import pytest
from fastmcp import Client, FastMCP

from docseek.config import Settings
from docseek.mcp.tools.search import register_search_tools
from docseek.search.client import SearchEngineClient
from fake_engine import FakeEngine, make_client, make_source


class DummyState:
    def __init__(self, search: Optional[SearchEngineClient]) -> None:
        self.settings = Settings()
        self.search = search


def _extract_json_payload(result: Any) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    if isinstance(result, (dict, list)):
        return result
    # FastMCP Client returns CallToolResult with content list of TextContent
    content = getattr(result, "content", None)
    if isinstance(content, list) and content:
        for item in content:
            text = getattr(item, "text", None)
            if isinstance(text, str):
                try:
                    return json.loads(text)
                except json.JSONDecodeError:
                    continue
    raise AssertionError("Unable to extract JSON payload from tool result")


@pytest.mark.asyncio
async def test_search_tools_load_and_paginate() -> None:
    engine = FakeEngine([make_source(i) for i in range(12)])
    state = DummyState(make_client(engine.handler))
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        res_page = await client.call_tool(
            "search_load_page", {"index": None, "offset": 0, "size": 5, "cursor": None}
        )
        res_offset = await client.call_tool(
            "search_paginate_offset",
            {"index": None, "page_size": 5, "bound": 20, "stop_when_exhausted": False},
        )
        res_cursor = await client.call_tool(
            "search_paginate_cursor",
            {"index": None, "page_size": 5, "iterations": 10, "stop_when_exhausted": True},
        )

    page = _extract_json_payload(res_page)
    assert [d["ID"] for d in page["documents"]] == [0, 1, 2, 3, 4]
    assert page["total"] == 12
    assert page["cursor"] == 4
    assert page["truncated"] is False

    offset = _extract_json_payload(res_offset)
    assert offset["count"] == 12
    assert offset["pages"] == 4

    cursor = _extract_json_payload(res_cursor)
    assert cursor["count"] == 12
    assert cursor["pages"] == 3
    assert cursor["last_cursor"] == 11


@pytest.mark.asyncio
async def test_search_store_document_tool() -> None:
    engine = FakeEngine()
    state = DummyState(make_client(engine.handler))
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        res = await client.call_tool(
            "search_store_document",
            {
                "doc_id": 5,
                "username": "five",
                "created_at": "2024-03-04T05:06:07+00:00",
                "index": "people",
            },
        )

    payload = _extract_json_payload(res)
    assert payload["ok"] is True
    assert payload["index"] == "people"
    assert engine.sources[0]["ID"] == 5
    assert engine.sources[0]["Username"] == "five"


@pytest.mark.asyncio
async def test_search_tools_require_configuration() -> None:
    state = DummyState(None)
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        with pytest.raises(Exception, match="not configured"):
            await client.call_tool("search_load_page", {"index": None, "offset": 0, "size": 5})
