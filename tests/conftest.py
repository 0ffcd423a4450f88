"""
Pytest configuration and shared fixtures.

Nothing here touches the network: `FakeWiki` stands in for the Wikipedia
content source and the in-memory store stands in for persistence.
"""

from __future__ import annotations

from typing import Iterable

import httpx
import pytest

from influence_graph.graph.builder import GraphBuilder
from influence_graph.ingest import InfluenceIngestor
from influence_graph.models import Artist, ArtistStatus, WikiPage, utcnow
from influence_graph.resolver import ArtistResolver
from influence_graph.store.memory import InMemoryArtistStore


def infobox(influences: Iterable[str] = (), influenced: Iterable[str] = (), kind: str = "musical artist") -> str:
    lines = [f"{{{{Infobox {kind}", "| name = Someone"]
    if influences:
        lines.append("| influences = " + ", ".join(f"[[{t}]]" for t in influences))
    if influenced:
        lines.append("| influenced = " + ", ".join(f"[[{t}]]" for t in influenced))
    lines.append("}}")
    return "\n".join(lines) + "\n"


class FakeWiki:
    """Content source backed by a dict of pages, recording every lookup."""

    def __init__(self):
        self.pages: dict[str, WikiPage] = {}
        self.calls: list[str] = []
        self.failing: set[str] = set()

    def add(
        self,
        title: str,
        markup: str = "",
        categories: Iterable[str] = (),
        *,
        aliases: Iterable[str] = (),
    ) -> WikiPage:
        page = WikiPage(
            title=title,
            summary=f"{title} is a test page.",
            thumbnail_url=f"https://upload.example/{title}.jpg",
            page_url=f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}",
            raw_markup=markup,
            categories=list(categories),
        )
        self.pages[title] = page
        for alias in aliases:
            self.pages[alias] = page
        return page

    def add_artist(self, title: str, influences: Iterable[str] = (), influenced: Iterable[str] = ()) -> WikiPage:
        return self.add(title, infobox(influences, influenced))

    async def fetch_page(self, title: str) -> WikiPage | None:
        self.calls.append(title)
        if title in self.failing:
            raise httpx.ConnectError(f"connection refused for {title}")
        return self.pages.get(title)


def validated(artist_id: str, **kw) -> Artist:
    return Artist(
        id=artist_id,
        name=artist_id.replace("_", " "),
        status=ArtistStatus.VALIDATED,
        fetched_at=utcnow(),
        **kw,
    )


@pytest.fixture
def store() -> InMemoryArtistStore:
    return InMemoryArtistStore()


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()


@pytest.fixture
def resolver(store, wiki) -> ArtistResolver:
    return ArtistResolver(store, wiki)


@pytest.fixture
def make_builder(store, wiki):
    def _make(*, influences_ttl_hours: float | None = None, **kw) -> GraphBuilder:
        resolver = ArtistResolver(store, wiki)
        ingestor = InfluenceIngestor(store, wiki, resolver, influences_ttl_hours=influences_ttl_hours)
        return GraphBuilder(store, resolver, ingestor, **kw)

    return _make
