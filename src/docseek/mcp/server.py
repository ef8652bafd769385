"""docseek MCP server entrypoint using FastMCP.

Exposes search tools built atop the shared search engine client.
Run with:
  - docseek-mcp
  - or: python -m docseek.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

from typing import Optional

from fastmcp import FastMCP

from docseek.config import Settings, load_settings
from docseek.logger import setup_logging
from docseek.mcp.tools import register_search_tools
from docseek.search.client import SearchEngineClient


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.search: Optional[SearchEngineClient] = None

    def init_clients(self) -> None:
        """Initialize the search client from configuration."""
        cfg = self.settings.search
        if cfg.hosts and cfg.default_index:
            self.search = SearchEngineClient.from_settings(cfg)
        else:
            self.search = None

    async def shutdown(self) -> None:
        """Close the shared search client; safe to call more than once."""
        if self.search is not None:
            await self.search.aclose()
            self.search = None


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("docseek MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    setup_logging(settings.app.log_level, settings.app.log_format)
    _state = AppState(settings)
    _state.init_clients()
    register_search_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
