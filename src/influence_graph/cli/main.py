from __future__ import annotations

import argparse
import asyncio
import json

from influence_graph.settings import settings


def _configure_logging() -> None:
    import logging

    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _store(args: argparse.Namespace):
    from influence_graph.store import build_store

    cfg = settings.model_copy()
    if getattr(args, "store", None):
        cfg.store_backend = args.store
    if getattr(args, "sqlite_path", None):
        cfg.sqlite_path = args.sqlite_path
    return build_store(cfg)


def cmd_version() -> int:
    from influence_graph import __version__

    print(__version__)
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    _configure_logging()
    from influence_graph.graph.builder import GraphBuilder
    from influence_graph.wiki.client import WikipediaClient

    async def run():
        client = WikipediaClient()
        try:
            builder = GraphBuilder.create(_store(args), client, settings)
            return await builder.build(args.slug, args.depth)
        finally:
            await client.aclose()

    result = asyncio.run(run())
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return 0

    print(f"{len(result.nodes)} nodes, {len(result.links)} links, truncated={result.truncated}")
    for node in sorted(result.nodes, key=lambda n: (n.depth, n.id)):
        print(f"  [{node.depth}] {node.name}")
    for link in result.links:
        print(f"  {link.source} -> {link.target}")
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    _configure_logging()
    from influence_graph.ingest import InfluenceIngestor
    from influence_graph.resolver import ArtistResolver
    from influence_graph.wiki.client import WikipediaClient

    async def run() -> int:
        client = WikipediaClient()
        store = _store(args)
        try:
            resolver = ArtistResolver(store, client, rejection_ttl_hours=settings.rejection_ttl_hours)
            artist = await resolver.resolve(args.slug)
            if artist is None:
                print(f"{args.slug}: INVALID")
                return 1
            print(f"{args.slug}: validated as {artist.name} ({artist.id})")
            if args.influences:
                ingestor = InfluenceIngestor(
                    store, client, resolver, influences_ttl_hours=settings.influences_ttl_hours
                )
                stats = await ingestor.ingest(artist.id)
                if stats.cached:
                    print("  influences cached, not refetched")
                else:
                    print(
                        f"  found {stats.relations} influences ({stats.new_shells} new) "
                        f"fetch={stats.fetch_ms:.0f}ms store={stats.store_ms:.0f}ms"
                    )
            return 0
        finally:
            await client.aclose()

    return asyncio.run(run())


def cmd_inspect(args: argparse.Namespace) -> int:
    from influence_graph.models import to_canonical_id

    store = _store(args)
    artist_id = to_canonical_id(args.slug)
    artist = store.get_artist(artist_id)
    if artist is None:
        print("Artist not found in store.")
        return 1

    print(f"{artist.name} ({artist.id}) status={artist.status.value}")
    given = []
    received = []
    for e in store.edges_of(artist_id):
        if e.from_id == artist_id:
            given.append((e.to_id, e))
        else:
            received.append((e.from_id, e))

    for title, edges in (("Influenced", given), ("Influenced by", received)):
        print(f"\n{title}: {len(edges)}")
        for other_id, e in sorted(edges, key=lambda x: x[0]):
            other = store.get_artist(other_id)
            fetched = "yes" if other is not None and other.is_validated else "no"
            print(f"- {other_id} [{e.relation_kind.value}/{e.provenance.value}] fetched={fetched}")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear the store without --yes")
        return 2
    _store(args).clear()
    print("Store cleared.")
    return 0


def cmd_serve() -> int:
    from influence_graph.service.server import main

    main()
    return 0


def _add_store_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--store", default=None, help="memory|sqlite|neo4j")
    p.add_argument("--sqlite-path", default=None)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="influence-graph")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version").set_defaults(func=lambda _a: cmd_version())

    graph = sub.add_parser("graph", help="Build the influence graph around an artist")
    graph.add_argument("slug")
    graph.add_argument("--depth", type=int, default=settings.default_depth)
    graph.add_argument("--json", action="store_true")
    _add_store_args(graph)
    graph.set_defaults(func=cmd_graph)

    resolve = sub.add_parser("resolve", help="Check whether a page is a musical artist")
    resolve.add_argument("slug")
    resolve.add_argument("--influences", action="store_true", help="Also extract and store influences")
    _add_store_args(resolve)
    resolve.set_defaults(func=cmd_resolve)

    inspect = sub.add_parser("inspect", help="Show stored edges for an artist")
    inspect.add_argument("slug")
    _add_store_args(inspect)
    inspect.set_defaults(func=cmd_inspect)

    clear = sub.add_parser("clear", help="Delete every artist and edge")
    clear.add_argument("--yes", action="store_true")
    _add_store_args(clear)
    clear.set_defaults(func=cmd_clear)

    sub.add_parser("serve").set_defaults(func=lambda _a: cmd_serve())

    return p


def app(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    app()
