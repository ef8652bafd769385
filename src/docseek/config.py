from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "docseek"
    env: str = "development"
    debug: bool = True
    port: int = 8000
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"


class SearchConfig(BaseModel):
    """Search engine (Elasticsearch/OpenSearch) connection values."""

    hosts: List[str] = ["http://localhost:9200"]
    default_index: str = "my-simple-index"
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    # Seconds; sent to the engine as the query timeout and used for the HTTP client
    max_search_query_timeout: float = 30.0
    # Exact totals are needed for pagination decisions
    track_total_hits: bool = True
    verify_ssl: bool = True
    # Local dev clusters (e.g. Localstack) run without compression support
    disable_compression: bool = True
    mapping_path: str = "mapping.json"
    sort_field: str = "ID"


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="DOCSEEK_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
