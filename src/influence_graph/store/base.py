from __future__ import annotations

from typing import Protocol

from influence_graph.models import Artist, InfluenceEdge


class ArtistStore(Protocol):
    """Keyed persistence for artists and influence edges.

    Artists are keyed by canonical id. Edges are keyed by
    (from_id, to_id, relation_kind, provenance); `create_edge` upserts.
    """

    def get_artist(self, artist_id: str) -> Artist | None: ...

    def upsert_artist(self, artist: Artist) -> Artist: ...

    def create_edge(self, edge: InfluenceEdge) -> None: ...

    def edges_of(self, artist_id: str) -> list[InfluenceEdge]: ...

    def clear(self) -> None: ...
