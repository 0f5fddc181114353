# tests/test_site_audit.py
"""Tests for the site-wide audit."""

from seo_engine.documents import extract_doc_text
from seo_engine.lexical import flesch_reading_ease
from seo_engine.models import AnalysisResult, AuditEntry, SeoLevel
from seo_engine.site_audit import build_audit_entry, summarize_site_audit


def entry(doc_id, score, word_count=0, readability=0, collection='pages', **kwargs):
    return AuditEntry(
        id=doc_id,
        title=f"Page {doc_id}",
        slug=f"page-{doc_id}",
        collection=collection,
        score=score,
        level=SeoLevel.GOOD.value,
        word_count=word_count,
        readability_score=readability,
        **kwargs,
    )


def raw_doc(text, **fields):
    return {
        'id': 7,
        'title': "Tarifs",
        'slug': "tarifs",
        'content': {'root': {'children': [
            {'type': 'paragraph', 'children': [{'type': 'text', 'text': text}]},
        ]}},
        **fields,
    }


class TestSummarizeSiteAudit:
    """Tests for summarize_site_audit."""

    def test_stats(self):
        """Score bands, missing fields and averages are counted over every row."""
        entries = [
            entry(1, 85, 100, 60, focus_keyword="tarifs", meta_title="Tarifs", meta_description="Nos prix"),
            entry(2, 62, 200, 70, meta_title="Contact"),
            entry(3, 30, 0, 0),
            entry(4, 90, 301, 50, focus_keyword="seo", meta_description="Guide"),
        ]
        audit = summarize_site_audit(entries)
        assert audit.stats == {
            'total_pages': 4,
            'avg_score': 67,
            'good': 2,
            'needs_work': 1,
            'critical': 1,
            'no_keyword': 2,
            'no_meta_title': 2,
            'no_meta_description': 2,
            'avg_word_count': 150,
            'avg_readability': 45,
        }

    def test_band_edges(self):
        """80 is good, 50 needs work and 49 is critical."""
        audit = summarize_site_audit([entry(1, 80), entry(2, 50), entry(3, 49)])
        assert (audit.stats['good'], audit.stats['needs_work'], audit.stats['critical']) == (1, 1, 1)

    def test_worst_first_with_previous_scores(self):
        """Rows are sorted by score and carry the score before their latest snapshot."""
        entries = [entry(1, 85), entry(2, 40, collection='posts'), entry(3, 62)]
        audit = summarize_site_audit(entries, {'posts::2': 52, 'pages::3': 70})

        assert [row.id for row in audit.entries] == [2, 3, 1]
        assert [row.previous_score for row in audit.entries] == [52, 70, None]
        assert entries[1].previous_score is None

    def test_empty(self):
        """An empty site averages to zero."""
        audit = summarize_site_audit([])
        assert audit.entries == []
        assert audit.stats['avg_score'] == 0
        assert audit.stats['avg_readability'] == 0


class TestBuildAuditEntry:
    """Tests for build_audit_entry."""

    def test_fields(self):
        """Meta fields, keyword and text statistics come from the raw document."""
        doc = raw_doc(
            " ".join(["Nos tarifs restent simples et clairs pour chaque projet web."] * 4),
            focusKeyword="tarifs",
            meta={'title': "Tarifs | Studio", 'description': 7},
        )
        result = AnalysisResult(score=58, level=SeoLevel.OK)
        row = build_audit_entry(doc, 'posts', result)

        text = extract_doc_text(doc)
        assert (row.id, row.slug, row.collection, row.score, row.level) == (7, "tarifs", 'posts', 58, "ok")
        assert row.focus_keyword == "tarifs"
        assert row.meta_title == "Tarifs | Studio"
        assert row.meta_description == ""
        assert row.word_count == len(text.split())
        assert row.word_count > 30
        assert row.readability_score == flesch_reading_ease(text, 'fr')

    def test_short_document_has_no_readability(self):
        """Documents of 30 words or fewer get a readability of 0."""
        row = build_audit_entry(raw_doc("Texte court."), 'pages', AnalysisResult(score=20, level=SeoLevel.POOR))
        assert row.readability_score == 0
