from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta

from influence_graph.extraction.relations import RelationExtractor, WikitextRelationExtractor
from influence_graph.models import (
    Artist,
    InfluenceEdge,
    to_canonical_id,
    to_lookup_title,
    utcnow,
)
from influence_graph.resolver import ArtistResolver
from influence_graph.store.base import ArtistStore
from influence_graph.wiki.client import ContentSource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestStats:
    artist_id: str | None
    relations: int
    new_shells: int
    fetch_ms: float
    store_ms: float
    cached: bool = False


class InfluenceIngestor:
    """Fetches an artist's page and persists its influence relations.

    Targets unknown to the store are written as shell artists; edges are
    upserted so repeated runs are idempotent.
    """

    def __init__(
        self,
        store: ArtistStore,
        source: ContentSource,
        resolver: ArtistResolver,
        extractor: RelationExtractor | None = None,
        *,
        influences_ttl_hours: float | None = None,
    ):
        self.store = store
        self.source = source
        self.resolver = resolver
        self.extractor = extractor or WikitextRelationExtractor()
        self.influences_ttl = timedelta(hours=influences_ttl_hours) if influences_ttl_hours is not None else None

    def _fresh(self, artist: Artist) -> bool:
        if self.influences_ttl is None or artist.influences_fetched_at is None:
            return False
        return utcnow() - artist.influences_fetched_at < self.influences_ttl

    async def ingest(self, identifier: str) -> IngestStats:
        artist_id = to_canonical_id(identifier)
        existing = self.store.get_artist(artist_id)
        if existing is not None and existing.is_validated and self._fresh(existing):
            return IngestStats(artist_id=artist_id, relations=0, new_shells=0, fetch_ms=0.0, store_ms=0.0, cached=True)

        t0 = time.perf_counter()
        page = await self.source.fetch_page(to_lookup_title(identifier))
        t1 = time.perf_counter()
        if page is None:
            return IngestStats(artist_id=None, relations=0, new_shells=0, fetch_ms=(t1 - t0) * 1000.0, store_ms=0.0)

        # Ensure the subject exists in the store under its canonical title.
        subject = self.store.get_artist(to_canonical_id(page.title))
        if subject is None or not subject.is_validated:
            subject = self.resolver.resolve_page(page, requested_id=artist_id)
            if subject is None:
                return IngestStats(artist_id=None, relations=0, new_shells=0, fetch_ms=(t1 - t0) * 1000.0, store_ms=0.0)

        relations = self.extractor.extract(page.raw_markup, subject.id)
        new_shells = 0
        for rel in relations:
            target_id = to_canonical_id(rel.target)
            if self.store.get_artist(target_id) is None:
                self.store.upsert_artist(Artist(id=target_id, name=rel.target))
                new_shells += 1
            from_id, to_id = rel.edge_for(subject.id)
            self.store.create_edge(
                InfluenceEdge(from_id=from_id, to_id=to_id, relation_kind=rel.kind, provenance=rel.provenance)
            )

        self.store.upsert_artist(subject.model_copy(update={"influences_fetched_at": utcnow()}))
        t2 = time.perf_counter()

        logger.debug(f"Ingested {len(relations)} relations for {subject.id} ({new_shells} new shells)")
        return IngestStats(
            artist_id=subject.id,
            relations=len(relations),
            new_shells=new_shells,
            fetch_ms=(t1 - t0) * 1000.0,
            store_ms=(t2 - t1) * 1000.0,
        )
