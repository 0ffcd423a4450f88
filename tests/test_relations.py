"""
Relation extraction tests.

Direction disambiguation is the heart of this module:
- infobox `influences`  => target influenced the subject (target -> subject)
- infobox `influenced`  => subject influenced the target (subject -> target)
- section headers decide direction for prose links
"""

import pytest

from influence_graph.extraction import (
    ExtractedRelation,
    WikitextRelationExtractor,
    kind_for_header,
    parse_wiki_links,
)
from influence_graph.models import Provenance, RelationKind


@pytest.fixture
def extractor() -> WikitextRelationExtractor:
    return WikitextRelationExtractor()


def _by_target(relations: list[ExtractedRelation]) -> dict[tuple[str, RelationKind], ExtractedRelation]:
    return {(r.target, r.kind): r for r in relations}


class TestWikiLinks:
    def test_target_is_taken_not_label(self):
        assert parse_wiki_links("[[Cream (band)|Cream]] and [[Blue Cheer]]") == ["Cream (band)", "Blue Cheer"]

    def test_denylisted_targets_are_dropped(self):
        text = "[[Rolling Stone]] [[London]] [[List of blues musicians]] [[Category:Bands]] [[Muddy Waters]]"
        assert parse_wiki_links(text) == ["Muddy Waters"]

    def test_no_links(self):
        assert parse_wiki_links("plain text only") == []


class TestHeaderDirection:
    @pytest.mark.parametrize(
        "header,kind",
        [
            ("Influenced by", RelationKind.INFLUENCED_BY),
            ("Artists influenced by them", RelationKind.INFLUENCED_BY),
            ("Influenced", RelationKind.INFLUENCED),
            ("Musical style and influences", RelationKind.INFLUENCED_BY),
            ("Influences", RelationKind.INFLUENCED_BY),
        ],
    )
    def test_kind_for_header(self, header, kind):
        assert kind_for_header(header) == kind


class TestInfobox:
    def test_influences_field_points_at_subject(self, extractor):
        markup = "{{Infobox musical artist\n| name = Alpha\n| influences = [[Beta]]\n}}"
        [rel] = extractor.extract(markup, "Alpha")

        assert rel.kind == RelationKind.INFLUENCED_BY
        assert rel.provenance == Provenance.INFOBOX
        assert rel.edge_for("Alpha") == ("Beta", "Alpha")

    def test_influenced_field_points_away_from_subject(self, extractor):
        markup = "{{Infobox musical artist\n| name = Alpha\n| influenced = [[Charlie Parker]]\n}}"
        [rel] = extractor.extract(markup, "Alpha")

        assert rel.kind == RelationKind.INFLUENCED
        assert rel.edge_for("Alpha") == ("Alpha", "Charlie_Parker")

    def test_multiline_field_with_labels(self, extractor):
        markup = (
            "{{Infobox musical artist\n"
            "| name = Alpha\n"
            "| influences = {{flatlist|\n"
            "* [[Cream (band)|Cream]]\n"
            "* [[Blue Cheer]]\n"
            "}}\n"
            "| genre = [[Heavy metal music|Heavy metal]]\n"
            "}}"
        )
        targets = [r.target for r in extractor.extract(markup, "Alpha")]

        assert targets == ["Cream (band)", "Blue Cheer"]

    def test_empty_field_does_not_swallow_next_line(self, extractor):
        markup = "{{Infobox musical artist\n| name = A\n| influences =\n| influenced = [[C]]\n}}"
        rels = extractor.extract(markup, "A")

        assert [(r.target, r.kind) for r in rels] == [("C", RelationKind.INFLUENCED)]
        assert rels[0].edge_for("A") == ("A", "C")

    def test_blank_field_ignores_following_fields(self, extractor):
        markup = (
            "{{Infobox musical artist\n"
            "| name = A\n"
            "| influenced = \n"
            "| genre = [[Rock music]]\n"
            "| influences = [[B]]\n"
            "}}"
        )
        rels = extractor.extract(markup, "A")

        assert [(r.target, r.kind) for r in rels] == [("B", RelationKind.INFLUENCED_BY)]

    def test_field_name_case_insensitive(self, extractor):
        markup = "{{Infobox band\n| Influences = [[Beta]]\n}}"
        assert [r.target for r in extractor.extract(markup, "Alpha")] == ["Beta"]


class TestSections:
    def test_influenced_by_header_matches_infobox_influences(self, extractor):
        markup = "== Early life ==\nBorn near [[Epsilon]].\n== Influenced by ==\n[[Delta]] and [[Zeta]]\n== Legacy ==\n"
        rels = extractor.extract(markup, "Alpha")

        assert [(r.target, r.kind) for r in rels] == [
            ("Delta", RelationKind.INFLUENCED_BY),
            ("Zeta", RelationKind.INFLUENCED_BY),
        ]
        assert all(r.provenance == Provenance.SECTION for r in rels)
        assert rels[0].edge_for("Alpha") == ("Delta", "Alpha")

    def test_influenced_header_points_away(self, extractor):
        markup = "== Influenced ==\n[[Omega]]\n"
        [rel] = extractor.extract(markup, "Alpha")
        assert rel.edge_for("Alpha") == ("Alpha", "Omega")

    def test_generic_influence_header_defaults_to_influenced_by(self, extractor):
        markup = "== Musical style and influences ==\nThey cited [[Little Richard]].\n"
        [rel] = extractor.extract(markup, "Alpha")
        assert rel.kind == RelationKind.INFLUENCED_BY

    def test_section_ends_at_next_header(self, extractor):
        markup = "== Influences ==\n[[Beta]]\n=== Later work ===\n[[Gamma]]\n"
        assert [r.target for r in extractor.extract(markup, "Alpha")] == ["Beta"]


class TestDedup:
    def test_same_target_in_infobox_and_prose_reported_once(self, extractor):
        markup = "{{Infobox musical artist\n| influences = [[Beta]]\n}}\n== Influences ==\n[[Beta]] again.\n"
        rels = extractor.extract(markup, "Alpha")

        assert len(rels) == 1
        assert rels[0].provenance == Provenance.INFOBOX

    def test_buckets_are_independent(self, extractor):
        markup = "{{Infobox musical artist\n| influences = [[Beta]]\n| influenced = [[Beta]]\n}}"
        rels = _by_target(extractor.extract(markup, "Alpha"))

        assert set(rels) == {("Beta", RelationKind.INFLUENCED_BY), ("Beta", RelationKind.INFLUENCED)}

    def test_self_reference_dropped(self, extractor):
        markup = "{{Infobox band\n| influences = [[The Beatles]], [[Elvis Presley]]\n}}"
        assert [r.target for r in extractor.extract(markup, "The_Beatles")] == ["Elvis Presley"]


class TestMalformed:
    @pytest.mark.parametrize("markup", ["", "no structure at all", "{{Infobox musical artist\n| name = X\n}}"])
    def test_yields_nothing(self, extractor, markup):
        assert extractor.extract(markup, "Alpha") == []
