from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from influence_graph.ingest import InfluenceIngestor
from influence_graph.models import Artist, GraphLink, GraphNode, GraphResult, RelationKind
from influence_graph.resolver import ArtistResolver
from influence_graph.settings import InfluenceGraphSettings, settings as default_settings
from influence_graph.store.base import ArtistStore
from influence_graph.wiki.client import ContentSource

logger = logging.getLogger(__name__)

MAX_NODES = 200
MAX_EDGES = 450
MAX_INFLUENCES_PER_ARTIST = 10
MIN_DEPTH = 1
MAX_DEPTH = 3
DEFAULT_DEPTH = 2


def clamp_depth(depth: int) -> int:
    return max(MIN_DEPTH, min(int(depth), MAX_DEPTH))


@dataclass(frozen=True, slots=True)
class Neighbor:
    """An artist adjacent to the node being expanded.

    `outgoing` is True when the expanded node is the edge's source.
    """

    artist_id: str
    relation_kind: RelationKind
    outgoing: bool


class GraphBuilder:
    """Bounded breadth-first expansion around a root artist.

    All traversal state lives inside one `build` call, so a single builder
    can serve concurrent requests.
    """

    def __init__(
        self,
        store: ArtistStore,
        resolver: ArtistResolver,
        ingestor: InfluenceIngestor,
        *,
        max_nodes: int = MAX_NODES,
        max_edges: int = MAX_EDGES,
        max_neighbors: int = MAX_INFLUENCES_PER_ARTIST,
        default_depth: int = DEFAULT_DEPTH,
    ):
        self.store = store
        self.resolver = resolver
        self.ingestor = ingestor
        self.max_nodes = max_nodes
        self.max_edges = max_edges
        self.max_neighbors = max_neighbors
        self.default_depth = default_depth

    @classmethod
    def create(
        cls,
        store: ArtistStore,
        source: ContentSource,
        cfg: InfluenceGraphSettings | None = None,
    ) -> "GraphBuilder":
        cfg = cfg or default_settings
        resolver = ArtistResolver(store, source, rejection_ttl_hours=cfg.rejection_ttl_hours)
        ingestor = InfluenceIngestor(store, source, resolver, influences_ttl_hours=cfg.influences_ttl_hours)
        return cls(
            store,
            resolver,
            ingestor,
            max_nodes=cfg.max_nodes,
            max_edges=cfg.max_edges,
            max_neighbors=cfg.max_neighbors,
            default_depth=cfg.default_depth,
        )

    def _at_cap(self, nodes: dict[str, GraphNode], links: list[GraphLink]) -> bool:
        return len(nodes) >= self.max_nodes or len(links) >= self.max_edges

    @staticmethod
    def _node(artist: Artist, depth: int) -> GraphNode:
        return GraphNode(
            id=artist.id,
            name=artist.name,
            depth=depth,
            image_url=artist.image_url,
            wiki_url=artist.wiki_url,
        )

    def neighbors(self, artist_id: str) -> list[Neighbor]:
        """Deterministic, de-duplicated, truncated neighbor list for one node."""
        try:
            edges = self.store.edges_of(artist_id)
        except Exception as e:
            logger.error(f"Edge lookup error for {artist_id}: {e}")
            return []

        found: list[Neighbor] = []
        for e in edges:
            if e.from_id == artist_id and e.to_id != artist_id:
                found.append(Neighbor(e.to_id, e.relation_kind, outgoing=True))
            elif e.to_id == artist_id and e.from_id != artist_id:
                found.append(Neighbor(e.from_id, e.relation_kind, outgoing=False))

        found.sort(key=lambda n: (n.artist_id, n.outgoing, n.relation_kind.value))
        seen: set[tuple[str, bool]] = set()
        out: list[Neighbor] = []
        for n in found:
            if (n.artist_id, n.outgoing) in seen:
                continue
            seen.add((n.artist_id, n.outgoing))
            out.append(n)
        return out[: self.max_neighbors]

    async def _validate(self, artist_id: str) -> Artist | None:
        existing = self.store.get_artist(artist_id)
        if existing is not None and existing.is_validated:
            return existing
        try:
            return await self.resolver.resolve(artist_id)
        except Exception as e:
            logger.warning(f"Discarding neighbor {artist_id}: {e}")
            return None

    async def build(self, root_identifier: str, depth: int | None = None) -> GraphResult:
        depth = clamp_depth(self.default_depth if depth is None else depth)

        root = await self.resolver.resolve(root_identifier)
        if root is None:
            return GraphResult(nodes=[], links=[], truncated=False)

        nodes: dict[str, GraphNode] = {root.id: self._node(root, 0)}
        links: list[GraphLink] = []
        link_keys: set[tuple[str, str]] = set()
        visited: set[str] = {root.id}
        # shell id -> canonical id it resolved to (redirects), or None if invalid
        resolved: dict[str, str | None] = {}
        frontier: deque[tuple[str, int]] = deque([(root.id, 0)])
        truncated = False

        while frontier and not truncated:
            if self._at_cap(nodes, links):
                truncated = True
                break

            current_id, current_depth = frontier.popleft()
            if current_depth >= depth:
                continue

            try:
                await self.ingestor.ingest(current_id)
            except Exception as e:
                logger.warning(f"Error fetching influences for {current_id}: {e}")

            for neighbor in self.neighbors(current_id):
                if self._at_cap(nodes, links):
                    truncated = True
                    break

                neighbor_id = resolved.get(neighbor.artist_id, neighbor.artist_id)
                if neighbor_id is None:
                    continue

                if neighbor_id not in visited:
                    artist = await self._validate(neighbor_id)
                    if artist is None:
                        resolved[neighbor.artist_id] = None
                        continue
                    resolved[neighbor.artist_id] = artist.id
                    neighbor_id = artist.id
                    if neighbor_id not in visited:
                        visited.add(neighbor_id)
                        nodes[neighbor_id] = self._node(artist, current_depth + 1)
                        frontier.append((neighbor_id, current_depth + 1))

                if neighbor_id == current_id:
                    continue

                if neighbor.outgoing:
                    source, target = current_id, neighbor_id
                else:
                    source, target = neighbor_id, current_id
                if (source, target) in link_keys:
                    continue
                link_keys.add((source, target))
                links.append(GraphLink(source=source, target=target, relation_kind=neighbor.relation_kind))

        if self._at_cap(nodes, links):
            truncated = True

        return GraphResult(nodes=list(nodes.values()), links=links, truncated=truncated)
