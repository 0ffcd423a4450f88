from .relations import (
    ExtractedRelation,
    RelationExtractor,
    WikitextRelationExtractor,
    kind_for_header,
    parse_wiki_links,
)

__all__ = [
    "ExtractedRelation",
    "RelationExtractor",
    "WikitextRelationExtractor",
    "kind_for_header",
    "parse_wiki_links",
]
