from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_canonical_id(title: str) -> str:
    """Canonical artist id: page title with spaces replaced by underscores."""
    return title.strip().replace(" ", "_")


def to_lookup_title(identifier: str) -> str:
    return identifier.replace("_", " ").replace("-", " ").strip()


class ArtistStatus(str, Enum):
    SHELL = "shell"
    VALIDATED = "validated"
    REJECTED = "rejected"


class RelationKind(str, Enum):
    """Direction tag of an influence edge relative to the page it came from.

    INFLUENCED_BY: the target influenced the subject (edge target -> subject).
    INFLUENCED: the subject influenced the target (edge subject -> target).
    """

    INFLUENCED_BY = "influenced_by"
    INFLUENCED = "influenced"


class Provenance(str, Enum):
    INFOBOX = "infobox"
    SECTION = "section"


class Artist(BaseModel):
    """A page known to the store.

    A record is only a validated musical artist when `fetched_at` is set.
    Records created as relation endpoints are shells until resolved.
    """

    id: str
    name: str
    summary: str | None = None
    image_url: str | None = None
    wiki_url: str | None = None

    status: ArtistStatus = ArtistStatus.SHELL
    fetched_at: datetime | None = None
    rejected_at: datetime | None = None
    influences_fetched_at: datetime | None = None

    @property
    def is_validated(self) -> bool:
        return self.fetched_at is not None and self.status == ArtistStatus.VALIDATED


class InfluenceEdge(BaseModel):
    """A directed edge: `from_id` influenced `to_id`."""

    from_id: str
    to_id: str
    relation_kind: RelationKind
    provenance: Provenance
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self.from_id, self.to_id, self.relation_kind.value, self.provenance.value)


class WikiPage(BaseModel):
    title: str
    summary: str | None = None
    thumbnail_url: str | None = None
    page_url: str | None = None
    raw_markup: str = ""
    categories: list[str] = Field(default_factory=list)


class GraphNode(BaseModel):
    id: str
    name: str
    depth: int
    image_url: str | None = None
    wiki_url: str | None = None


class GraphLink(BaseModel):
    source: str
    target: str
    relation_kind: RelationKind


class GraphResult(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)
    truncated: bool = False
