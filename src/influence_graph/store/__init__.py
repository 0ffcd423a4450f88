"""Artist store backends.

- `InMemoryArtistStore`: process-local dicts
- `SQLiteArtistStore`: single-file persistence (default)
- `Neo4jArtistStore`: graph database (optional `neo4j` extra)
"""

from __future__ import annotations

from influence_graph.settings import InfluenceGraphSettings, settings as default_settings

from .base import ArtistStore
from .memory import InMemoryArtistStore
from .sqlite import SQLiteArtistStore


def build_store(cfg: InfluenceGraphSettings | None = None) -> ArtistStore:
    cfg = cfg or default_settings
    backend = (cfg.store_backend or "sqlite").lower()

    if backend == "memory":
        return InMemoryArtistStore()

    if backend == "sqlite":
        store = SQLiteArtistStore(path=cfg.sqlite_path)
        store.init()
        return store

    if backend == "neo4j":
        if not (cfg.neo4j_uri and cfg.neo4j_user and cfg.neo4j_password):
            raise RuntimeError(
                "Neo4j not configured. Set INFLUENCE_GRAPH_NEO4J_URI/USER/PASSWORD."
            )
        from .neo4j_store import Neo4jArtistStore, Neo4jConfig

        neo = Neo4jArtistStore(
            Neo4jConfig(
                uri=cfg.neo4j_uri,
                user=cfg.neo4j_user,
                password=cfg.neo4j_password,
                database=cfg.neo4j_database,
            )
        )
        neo.ensure_schema()
        return neo

    raise ValueError(f"Unknown store backend: {cfg.store_backend!r} (expected memory|sqlite|neo4j)")


__all__ = ["ArtistStore", "InMemoryArtistStore", "SQLiteArtistStore", "build_store"]
