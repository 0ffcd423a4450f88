from __future__ import annotations

import asyncio
import logging

import uvicorn

from influence_graph.graph.builder import GraphBuilder
from influence_graph.settings import settings
from influence_graph.store import build_store
from influence_graph.wiki.client import WikipediaClient

from .app import create_app


async def _main() -> None:
    logging.basicConfig(
        level=(settings.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = build_store(settings)
    client = WikipediaClient()
    app = create_app(GraphBuilder.create(store, client, settings))

    config = uvicorn.Config(
        app,
        host=settings.bind_host,
        port=settings.bind_port,
        log_level=(settings.log_level or "info").lower(),
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    finally:
        await client.aclose()
        close = getattr(store, "close", None)
        if close is not None:
            close()


def main() -> None:
    asyncio.run(_main())


if __name__ == "__main__":
    main()
