from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, Header, HTTPException

from influence_graph import __version__
from influence_graph.graph.builder import GraphBuilder
from influence_graph.settings import settings

logger = logging.getLogger(__name__)


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    """Guards the graph endpoints when `INFLUENCE_GRAPH_API_KEY` is set."""
    expected = settings.api_key
    if expected and x_api_key != expected:
        raise HTTPException(status_code=401, detail="missing or wrong X-API-Key")


def _parse_depth(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def create_app(builder: GraphBuilder) -> FastAPI:
    app = FastAPI(title="Influence Graph", version=__version__)

    @app.get("/health")
    async def health():
        return {"ok": True, "host": os.uname().nodename}

    @app.get("/v1/graph")
    async def graph(
        slug: str | None = None,
        depth: str | None = None,
        _auth: None = Depends(require_api_key),
    ):
        if not slug:
            raise HTTPException(status_code=400, detail="missing slug parameter")

        try:
            result = await builder.build(slug, _parse_depth(depth, builder.default_depth))
        except Exception:
            logger.exception(f"Graph build error for {slug}")
            raise HTTPException(status_code=500, detail="internal server error")
        return result.model_dump(mode="json")

    @app.get("/v1/artists/{slug}")
    async def artist(slug: str, _auth: None = Depends(require_api_key)):
        found = await builder.resolver.resolve(slug)
        if found is None:
            raise HTTPException(status_code=404, detail="not a known musical artist")
        return found.model_dump(mode="json")

    return app
