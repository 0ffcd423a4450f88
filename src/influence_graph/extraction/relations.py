from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from influence_graph.models import Provenance, RelationKind, to_canonical_id


@dataclass(frozen=True, slots=True)
class ExtractedRelation:
    """One influence relation found on a subject's page."""

    target: str
    kind: RelationKind
    provenance: Provenance

    def edge_for(self, subject_id: str) -> tuple[str, str]:
        """Return the directed (from_id, to_id) pair for this relation."""
        target_id = to_canonical_id(self.target)
        if self.kind == RelationKind.INFLUENCED_BY:
            return target_id, subject_id
        return subject_id, target_id


class RelationExtractor(Protocol):
    def extract(self, markup: str, subject_id: str) -> list[ExtractedRelation]: ...


# Link targets that are never artists: press, places, institutions, namespaces.
IGNORED_LINK_TERMS: tuple[str, ...] = (
    "The Guardian",
    "Rolling Stone",
    "AllMusic",
    "Billboard",
    "NME",
    "Wikipedia",
    "Category:",
    "File:",
    "Image:",
    "Help:",
    "Portal:",
    "United Kingdom",
    "United States",
    "London",
    "Liverpool",
    "England",
    "RIAA",
    "BBC",
    "MTV",
    "Grammy",
    "Academy Award",
    "Star-Club",
    "List of",
)

_LINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
_INFOBOX_FIELD_RE = re.compile(
    r"\|\s*(influences|influenced)[ \t]*=[ \t]*([\s\S]*?)(?=\n\s*\||\}\})", re.IGNORECASE
)
_SECTION_RE = re.compile(r"(={2,})\s*([^\n]+?)\s*\1([\s\S]*?)(?=={2,}|\Z)")


def parse_wiki_links(text: str, ignored: tuple[str, ...] = IGNORED_LINK_TERMS) -> list[str]:
    """`[[Target|Label]]` -> `Target`, skipping denylisted targets."""
    links: list[str] = []
    for m in _LINK_RE.finditer(text):
        target = m.group(1).split("|")[0].strip()
        if target and not any(term in target for term in ignored):
            links.append(target)
    return links


def kind_for_header(header: str) -> RelationKind:
    """Direction of an influence section, decided from its header alone."""
    h = header.lower()
    if "influenced by" in h:
        return RelationKind.INFLUENCED_BY
    if "influenced" in h and "by" not in h:
        return RelationKind.INFLUENCED
    return RelationKind.INFLUENCED_BY


@dataclass(slots=True)
class WikitextRelationExtractor:
    """Regex extractor for infobox fields and influence sections.

    Passes:
    - infobox `| influences = [[X]]` => X influenced subject
    - infobox `| influenced = [[Y]]` => subject influenced Y
    - `== ...influence... ==` sections, direction from the header text

    Relations are de-duplicated per kind; the first occurrence keeps its
    provenance. No I/O.
    """

    ignored_terms: tuple[str, ...] = IGNORED_LINK_TERMS

    def extract(self, markup: str, subject_id: str) -> list[ExtractedRelation]:
        if not markup:
            return []

        found: list[ExtractedRelation] = []

        for m in _INFOBOX_FIELD_RE.finditer(markup):
            field = m.group(1).lower()
            kind = RelationKind.INFLUENCED_BY if field == "influences" else RelationKind.INFLUENCED
            for target in parse_wiki_links(m.group(2), self.ignored_terms):
                found.append(ExtractedRelation(target, kind, Provenance.INFOBOX))

        for m in _SECTION_RE.finditer(markup):
            header = m.group(2).strip()
            if "influence" not in header.lower():
                continue
            kind = kind_for_header(header)
            for target in parse_wiki_links(m.group(3), self.ignored_terms):
                found.append(ExtractedRelation(target, kind, Provenance.SECTION))

        seen: set[tuple[str, RelationKind]] = set()
        deduped: list[ExtractedRelation] = []
        for rel in found:
            target_id = to_canonical_id(rel.target)
            key = (target_id, rel.kind)
            if key in seen or target_id == subject_id:
                continue
            seen.add(key)
            deduped.append(rel)
        return deduped
