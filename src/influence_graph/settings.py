from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InfluenceGraphSettings(BaseSettings):
    """Unified configuration for the influence graph.

    Environment variables are prefixed with INFLUENCE_GRAPH_.
    """

    model_config = SettingsConfigDict(env_prefix="INFLUENCE_GRAPH_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Wikipedia ---
    wiki_api_url: str = "https://en.wikipedia.org/w/api.php"
    user_agent: str = "influence-graph/0.1 (artist influence explorer)"
    http_retry_attempts: int = 5
    http_backoff_initial: float = 0.5
    http_backoff_max: float = 10.0
    rate_limit_per_sec: float = Field(default=10.0, description="Max upstream requests per second; 0 disables")

    # --- Store ---
    store_backend: str = Field(default="sqlite", description="memory|sqlite|neo4j")
    sqlite_path: str = Field(default="influence_graph.sqlite")
    neo4j_uri: str | None = None
    neo4j_user: str | None = None
    neo4j_password: str | None = None
    neo4j_database: str = "neo4j"

    # --- Traversal ---
    max_nodes: int = 200
    max_edges: int = 450
    max_neighbors: int = 10
    default_depth: int = 2
    rejection_ttl_hours: float | None = Field(
        default=None, description="How long a rejected page stays rejected. Unset: forever."
    )
    influences_ttl_hours: float | None = Field(
        default=24.0, description="Re-extract relations after this many hours. Unset: always."
    )

    # --- HTTP service ---
    bind_host: str = "0.0.0.0"
    bind_port: int = 8088
    api_key: str | None = Field(default=None, description="If set, require X-API-Key")


settings = InfluenceGraphSettings()
