from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from influence_graph.models import Artist, ArtistStatus, InfluenceEdge, Provenance, RelationKind, utcnow


@dataclass(slots=True)
class Neo4jConfig:
    uri: str
    user: str
    password: str
    database: str = "neo4j"


def _ts(v: datetime | None) -> str | None:
    return v.isoformat() if v else None


def _parse_ts(v: Any) -> datetime | None:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v
    # neo4j.time.DateTime and ISO strings
    if hasattr(v, "to_native"):
        return v.to_native()
    return datetime.fromisoformat(str(v))


class Neo4jArtistStore:
    """Neo4j-backed artist store.

    Artists are `(:Artist {id})` nodes; edges are `[:INFLUENCED]` relationships
    merged on (relation_kind, provenance) so re-extraction never duplicates.

    Dependency: neo4j>=5 (optional extra).
    """

    def __init__(self, cfg: Neo4jConfig):
        self.cfg = cfg
        from neo4j import GraphDatabase  # type: ignore

        # Driver is thread-safe; sessions are lightweight.
        self._driver = GraphDatabase.driver(cfg.uri, auth=(cfg.user, cfg.password))

    def close(self) -> None:
        self._driver.close()

    def ensure_schema(self) -> None:
        stmts = [
            "CREATE CONSTRAINT artist_id IF NOT EXISTS FOR (n:Artist) REQUIRE n.id IS UNIQUE",
            "CREATE INDEX artist_name IF NOT EXISTS FOR (n:Artist) ON (n.name)",
        ]
        with self._driver.session(database=self.cfg.database) as s:
            for q in stmts:
                s.run(q)

    def _query(self, cypher: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._driver.session(database=self.cfg.database) as s:
            res = s.run(cypher, **(params or {}))
            return [dict(r) for r in res]

    @staticmethod
    def _to_artist(props: dict[str, Any]) -> Artist:
        return Artist(
            id=props["id"],
            name=props.get("name") or props["id"],
            summary=props.get("summary"),
            image_url=props.get("image_url"),
            wiki_url=props.get("wiki_url"),
            status=ArtistStatus(props.get("status") or ArtistStatus.SHELL.value),
            fetched_at=_parse_ts(props.get("fetched_at")),
            rejected_at=_parse_ts(props.get("rejected_at")),
            influences_fetched_at=_parse_ts(props.get("influences_fetched_at")),
        )

    def get_artist(self, artist_id: str) -> Artist | None:
        rows = self._query("MATCH (a:Artist {id: $id}) RETURN properties(a) AS a LIMIT 1", {"id": artist_id})
        return self._to_artist(rows[0]["a"]) if rows else None

    def upsert_artist(self, artist: Artist) -> Artist:
        props = {
            "name": artist.name,
            "summary": artist.summary,
            "image_url": artist.image_url,
            "wiki_url": artist.wiki_url,
            "status": artist.status.value,
            "fetched_at": _ts(artist.fetched_at),
            "rejected_at": _ts(artist.rejected_at),
            "influences_fetched_at": _ts(artist.influences_fetched_at),
        }
        self._query("MERGE (a:Artist {id: $id}) SET a += $props", {"id": artist.id, "props": props})
        return artist

    def create_edge(self, edge: InfluenceEdge) -> None:
        q = """
        MATCH (a:Artist {id: $src})
        MATCH (b:Artist {id: $dst})
        MERGE (a)-[r:INFLUENCED {relation_kind: $kind, provenance: $prov}]->(b)
        ON CREATE SET r.created_at = $created_at
        """
        self._query(
            q,
            {
                "src": edge.from_id,
                "dst": edge.to_id,
                "kind": edge.relation_kind.value,
                "prov": edge.provenance.value,
                "created_at": _ts(edge.created_at),
            },
        )

    def edges_of(self, artist_id: str) -> list[InfluenceEdge]:
        q = """
        MATCH (a:Artist)-[r:INFLUENCED]->(b:Artist)
        WHERE a.id = $id OR b.id = $id
        RETURN a.id AS src, b.id AS dst, r.relation_kind AS kind,
               r.provenance AS prov, r.created_at AS created_at
        """
        return [
            InfluenceEdge(
                from_id=row["src"],
                to_id=row["dst"],
                relation_kind=RelationKind(row["kind"]),
                provenance=Provenance(row["prov"]),
                created_at=_parse_ts(row["created_at"]) or utcnow(),
            )
            for row in self._query(q, {"id": artist_id})
        ]

    def clear(self) -> None:
        self._query("MATCH (a:Artist) DETACH DELETE a")
