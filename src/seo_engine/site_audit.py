# src/seo_engine/site_audit.py
"""Site-wide audit: one row per document plus aggregate statistics."""

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Sequence

from seo_engine.constants import AUDIT_CRITICAL_SCORE, AUDIT_GOOD_SCORE, AUDIT_READABILITY_MIN_WORDS
from seo_engine.documents import build_seo_input, extract_doc_text, string_field
from seo_engine.lexical import count_words, flesch_reading_ease, js_round
from seo_engine.models import AnalysisResult, AuditEntry, SiteAudit

logger = logging.getLogger(__name__)


def build_audit_entry(
    raw_doc: Dict[str, Any],
    collection: str,
    result: AnalysisResult,
    locale: str = 'fr',
) -> AuditEntry:
    """Audit row of a raw document and its analysis.

    Readability is 0 for documents of 30 words or fewer.
    """
    seo_input = build_seo_input(raw_doc, collection)
    text = extract_doc_text(raw_doc)
    word_count = count_words(text)
    return AuditEntry(
        id=raw_doc.get('id'),
        title=string_field(raw_doc.get('title')),
        slug=seo_input.slug,
        collection=collection,
        score=result.score,
        level=result.level.value,
        focus_keyword=seo_input.focus_keyword,
        meta_title=seo_input.meta_title,
        meta_description=seo_input.meta_description,
        word_count=word_count,
        readability_score=(
            flesch_reading_ease(text, locale) if word_count > AUDIT_READABILITY_MIN_WORDS else 0
        ),
    )


def _average(values: Sequence[int]) -> int:
    return js_round(sum(values) / len(values)) if values else 0


def summarize_site_audit(
    entries: Sequence[AuditEntry],
    previous_scores: Optional[Mapping[str, int]] = None,
) -> SiteAudit:
    """Aggregate audit rows, worst score first.

    Documents score good from 80, need work from 50 and are critical
    below that.

    Args:
        entries: One row per audited document
        previous_scores: Score before the latest snapshot, per ``collection::id`` key

    Returns:
        SiteAudit with rows carrying their previous score
    """
    previous = previous_scores or {}
    rows = sorted(
        (replace(entry, previous_score=previous.get(entry.key)) for entry in entries),
        key=lambda entry: entry.score,
    )
    scores = [row.score for row in rows]

    stats = {
        'total_pages': len(rows),
        'avg_score': _average(scores),
        'good': sum(1 for score in scores if score >= AUDIT_GOOD_SCORE),
        'needs_work': sum(1 for score in scores if AUDIT_CRITICAL_SCORE <= score < AUDIT_GOOD_SCORE),
        'critical': sum(1 for score in scores if score < AUDIT_CRITICAL_SCORE),
        'no_keyword': sum(1 for row in rows if not row.focus_keyword),
        'no_meta_title': sum(1 for row in rows if not row.meta_title),
        'no_meta_description': sum(1 for row in rows if not row.meta_description),
        'avg_word_count': _average([row.word_count for row in rows]),
        'avg_readability': _average([row.readability_score for row in rows]),
    }
    logger.info(
        f"Site audit: {stats['total_pages']} pages, average score {stats['avg_score']}, "
        f"{stats['critical']} critical"
    )
    return SiteAudit(entries=rows, stats=stats)
