from __future__ import annotations

from dataclasses import dataclass, field

from influence_graph.models import Artist, InfluenceEdge


@dataclass
class InMemoryArtistStore:
    """Dict-backed store. Process-local; used for tests and one-off queries."""

    artists: dict[str, Artist] = field(default_factory=dict)
    edges: dict[tuple[str, str, str, str], InfluenceEdge] = field(default_factory=dict)

    def get_artist(self, artist_id: str) -> Artist | None:
        a = self.artists.get(artist_id)
        return a.model_copy() if a else None

    def upsert_artist(self, artist: Artist) -> Artist:
        self.artists[artist.id] = artist.model_copy()
        return artist.model_copy()

    def create_edge(self, edge: InfluenceEdge) -> None:
        self.edges.setdefault(edge.key, edge)

    def edges_of(self, artist_id: str) -> list[InfluenceEdge]:
        return [e for e in self.edges.values() if artist_id in (e.from_id, e.to_id)]

    def clear(self) -> None:
        self.artists.clear()
        self.edges.clear()
