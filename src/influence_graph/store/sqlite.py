from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime

from influence_graph.models import Artist, ArtistStatus, InfluenceEdge, Provenance, RelationKind

SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS artists (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  summary TEXT,
  image_url TEXT,
  wiki_url TEXT,
  status TEXT NOT NULL,
  fetched_at TEXT,
  rejected_at TEXT,
  influences_fetched_at TEXT
);

CREATE TABLE IF NOT EXISTS influences (
  from_id TEXT NOT NULL,
  to_id TEXT NOT NULL,
  relation_kind TEXT NOT NULL,
  provenance TEXT NOT NULL,
  created_at TEXT NOT NULL,
  PRIMARY KEY (from_id, to_id, relation_kind, provenance)
);

CREATE INDEX IF NOT EXISTS idx_influences_to ON influences(to_id);
"""

_ARTIST_COLS = "id,name,summary,image_url,wiki_url,status,fetched_at,rejected_at,influences_fetched_at"


def _ts(v: datetime | None) -> str | None:
    return v.isoformat() if v else None


def _parse_ts(v: str | None) -> datetime | None:
    return datetime.fromisoformat(v) if v else None


@dataclass
class SQLiteArtistStore:
    path: str

    def connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.path)
        con.execute("PRAGMA foreign_keys=ON")
        return con

    def init(self) -> None:
        con = self.connect()
        try:
            con.executescript(SCHEMA)
            con.commit()
        finally:
            con.close()

    @staticmethod
    def _to_artist(row: tuple) -> Artist:
        return Artist(
            id=row[0],
            name=row[1],
            summary=row[2],
            image_url=row[3],
            wiki_url=row[4],
            status=ArtistStatus(row[5]),
            fetched_at=_parse_ts(row[6]),
            rejected_at=_parse_ts(row[7]),
            influences_fetched_at=_parse_ts(row[8]),
        )

    def get_artist(self, artist_id: str) -> Artist | None:
        con = self.connect()
        try:
            row = con.execute(
                f"SELECT {_ARTIST_COLS} FROM artists WHERE id=?", (artist_id,)
            ).fetchone()
            return self._to_artist(row) if row else None
        finally:
            con.close()

    def upsert_artist(self, artist: Artist) -> Artist:
        con = self.connect()
        try:
            con.execute(
                f"""
                INSERT INTO artists({_ARTIST_COLS}) VALUES (?,?,?,?,?,?,?,?,?)
                ON CONFLICT(id) DO UPDATE SET
                  name=excluded.name, summary=excluded.summary,
                  image_url=excluded.image_url, wiki_url=excluded.wiki_url,
                  status=excluded.status, fetched_at=excluded.fetched_at,
                  rejected_at=excluded.rejected_at,
                  influences_fetched_at=excluded.influences_fetched_at
                """,
                (
                    artist.id,
                    artist.name,
                    artist.summary,
                    artist.image_url,
                    artist.wiki_url,
                    artist.status.value,
                    _ts(artist.fetched_at),
                    _ts(artist.rejected_at),
                    _ts(artist.influences_fetched_at),
                ),
            )
            con.commit()
        finally:
            con.close()
        return artist

    def create_edge(self, edge: InfluenceEdge) -> None:
        con = self.connect()
        try:
            con.execute(
                """
                INSERT INTO influences(from_id, to_id, relation_kind, provenance, created_at)
                VALUES (?,?,?,?,?)
                ON CONFLICT(from_id, to_id, relation_kind, provenance) DO NOTHING
                """,
                (
                    edge.from_id,
                    edge.to_id,
                    edge.relation_kind.value,
                    edge.provenance.value,
                    _ts(edge.created_at),
                ),
            )
            con.commit()
        finally:
            con.close()

    def edges_of(self, artist_id: str) -> list[InfluenceEdge]:
        con = self.connect()
        try:
            rows = con.execute(
                """
                SELECT from_id, to_id, relation_kind, provenance, created_at
                FROM influences WHERE from_id=? OR to_id=?
                """,
                (artist_id, artist_id),
            ).fetchall()
        finally:
            con.close()
        return [
            InfluenceEdge(
                from_id=r[0],
                to_id=r[1],
                relation_kind=RelationKind(r[2]),
                provenance=Provenance(r[3]),
                created_at=_parse_ts(r[4]),
            )
            for r in rows
        ]

    def clear(self) -> None:
        con = self.connect()
        try:
            con.execute("DELETE FROM influences")
            con.execute("DELETE FROM artists")
            con.commit()
        finally:
            con.close()
