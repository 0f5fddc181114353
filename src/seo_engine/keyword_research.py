# src/seo_engine/keyword_research.py
"""Corpus-wide keyword research and cannibalization detection."""

import logging
import math
import re
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence

from seo_engine.constants import (
    LONG_TAIL_MIN_FREQUENCY,
    MAX_LONG_TAIL_SUGGESTIONS,
    MAX_RELATED_SUGGESTIONS,
    MAX_SUGGESTED_FOR,
    MAX_TRENDING_SUGGESTIONS,
    MAX_UNUSED_SUGGESTIONS,
    MIN_SUGGESTION_SCORE,
    MIN_TERM_FREQUENCY,
    MIN_UNUSED_TERM_LENGTH,
    RELATED_MAX_SCORE,
    TRENDING_MIN_DOC_FREQUENCY,
)
from seo_engine.lexical import extract_ngrams, js_round, simple_stem, tokenize
from seo_engine.models import (
    CannibalizationConflict,
    CannibalizationReport,
    ConflictPage,
    DocRecord,
    KeywordResearchResult,
    KeywordSuggestion,
    KeywordUsage,
    SuggestionType,
)
from seo_engine.text_extraction import normalize_for_comparison

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')


class KeywordResearcher:
    """Mines a corpus for keyword opportunities.

    Term statistics are computed once in the constructor; ``research()``
    then derives the four suggestion categories from them.
    """

    def __init__(self, docs: Sequence[DocRecord], locale: str = 'fr'):
        """Index the corpus.

        Args:
            docs: Corpus documents
            locale: Language of the corpus (selects stop words and stemmer)
        """
        self.docs = list(docs)
        self.locale = locale

        self.doc_term_freqs: List[Counter] = []
        self.doc_frequency: Counter = Counter()
        self.global_term_freq: Counter = Counter()
        self.term_docs: Dict[str, List[int]] = {}

        self.ngram_freq: Counter = Counter()
        self.ngram_docs: Dict[str, List[int]] = {}

        self.existing_keywords: Dict[str, List[str]] = {}

        self._index()

    def _index(self) -> None:
        for i, doc in enumerate(self.docs):
            term_freq: Counter = Counter()
            for token in tokenize(doc.full_text, self.locale):
                term_freq[token] += 1
                self.global_term_freq[token] += 1
                if term_freq[token] == 1:
                    self.doc_frequency[token] += 1
                    self.term_docs.setdefault(token, []).append(i)
            self.doc_term_freqs.append(term_freq)

            seen = set()
            for ngram in extract_ngrams(doc.full_text, self.locale):
                self.ngram_freq[ngram] += 1
                if ngram not in seen:
                    seen.add(ngram)
                    self.ngram_docs.setdefault(ngram, []).append(i)

            if doc.focus_keyword:
                normalized = normalize_for_comparison(doc.focus_keyword)
                self.existing_keywords.setdefault(normalized, []).append(doc.title)

    def _titles(self, indices: Sequence[int]) -> List[str]:
        return [self.docs[i].title for i in indices[:MAX_SUGGESTED_FOR]]

    def _top_docs_for(self, term: str) -> List[str]:
        """Titles of the documents using a term most often."""
        ranked = sorted(
            self.term_docs.get(term, []),
            key=lambda i: -self.doc_term_freqs[i][term],
        )
        return self._titles(ranked)

    def _sorted_terms(self) -> List[tuple]:
        frequent = [(t, f) for t, f in self.global_term_freq.items() if f >= MIN_TERM_FREQUENCY]
        return sorted(frequent, key=lambda item: -item[1])

    def _unused(self, terms, added: set) -> List[KeywordSuggestion]:
        total_docs = len(self.docs)
        suggestions = []
        for term, freq in terms:
            if term in added or term in self.existing_keywords or len(term) < MIN_UNUSED_TERM_LENGTH:
                continue
            df = self.doc_frequency.get(term) or 1
            score = min(100, js_round(freq * math.log(total_docs / df) * 2))
            if score < MIN_SUGGESTION_SCORE:
                continue
            suggestions.append(KeywordSuggestion(
                keyword=term,
                type=SuggestionType.UNUSED,
                score=score,
                frequency=df,
                suggested_for=self._top_docs_for(term),
            ))
            added.add(term)
            if len(suggestions) >= MAX_UNUSED_SUGGESTIONS:
                break
        return suggestions

    def _trending(self, terms, added: set) -> List[KeywordSuggestion]:
        suggestions = []
        for term, freq in terms:
            if term in added or len(term) < MIN_UNUSED_TERM_LENGTH:
                continue
            df = self.doc_frequency.get(term, 0)
            if df < TRENDING_MIN_DOC_FREQUENCY:
                continue
            used_by = list(self.existing_keywords.get(term, []))
            suggestions.append(KeywordSuggestion(
                keyword=term,
                type=SuggestionType.TRENDING,
                score=min(100, js_round(freq * 1.5)),
                frequency=df,
                currently_used_by=used_by,
                suggested_for=[] if used_by else self._titles(self.term_docs.get(term, [])),
            ))
            added.add(term)
            if len(suggestions) >= MAX_TRENDING_SUGGESTIONS:
                break
        return suggestions

    def _related(self, terms, added: set) -> List[KeywordSuggestion]:
        keyword_stems: Dict[str, str] = {}
        for keyword in self.existing_keywords:
            stem = simple_stem(keyword, self.locale)
            if len(stem) >= 3:
                keyword_stems[stem] = keyword

        suggestions = []
        for term, _ in terms:
            if term in added or term in self.existing_keywords or len(term) < MIN_UNUSED_TERM_LENGTH:
                continue
            stem = simple_stem(term, self.locale)
            if len(stem) < 3 or stem not in keyword_stems:
                continue
            df = self.doc_frequency.get(term) or 1
            suggestions.append(KeywordSuggestion(
                keyword=term,
                type=SuggestionType.RELATED,
                score=min(RELATED_MAX_SCORE, js_round(df * 10)),
                frequency=df,
                currently_used_by=list(self.existing_keywords[keyword_stems[stem]]),
                suggested_for=self._titles(self.term_docs.get(term, [])),
            ))
            added.add(term)
            if len(suggestions) >= MAX_RELATED_SUGGESTIONS:
                break
        return suggestions

    def _long_tail(self, added: set) -> List[KeywordSuggestion]:
        ngrams = sorted(
            ((n, f) for n, f in self.ngram_freq.items() if f >= LONG_TAIL_MIN_FREQUENCY),
            key=lambda item: -item[1],
        )
        suggestions = []
        for ngram, freq in ngrams:
            if ngram in added or ngram in self.existing_keywords:
                continue
            docs = self.ngram_docs.get(ngram, [])
            df = len(docs)
            score = min(100, js_round(freq * 3 + df * 5))
            if score < MIN_SUGGESTION_SCORE:
                continue
            suggestions.append(KeywordSuggestion(
                keyword=ngram,
                type=SuggestionType.LONG_TAIL,
                score=score,
                frequency=df,
                suggested_for=self._titles(docs),
            ))
            added.add(ngram)
            if len(suggestions) >= MAX_LONG_TAIL_SUGGESTIONS:
                break
        return suggestions

    def research(self) -> KeywordResearchResult:
        """Build keyword suggestions for the corpus.

        Returns:
            KeywordResearchResult sorted by score, best first
        """
        if not self.docs:
            return KeywordResearchResult(
                suggestions=[],
                stats={'total_keywords_analyzed': 0, 'unique_terms': 0, 'suggestions_count': 0},
            )

        terms = self._sorted_terms()
        added: set = set()
        suggestions = []
        suggestions.extend(self._unused(terms, added))
        suggestions.extend(self._trending(terms, added))
        suggestions.extend(self._related(terms, added))
        suggestions.extend(self._long_tail(added))
        suggestions.sort(key=lambda s: -s.score)

        stats = {
            'total_keywords_analyzed': len(self.existing_keywords),
            'unique_terms': len(self.global_term_freq),
            'suggestions_count': len(suggestions),
        }
        logger.info(
            f"Keyword research over {len(self.docs)} documents: "
            f"{stats['suggestions_count']} suggestions"
        )
        return KeywordResearchResult(suggestions=suggestions, stats=stats)


def research_keywords(docs: Sequence[DocRecord], locale: str = 'fr') -> KeywordResearchResult:
    """Keyword suggestions for a corpus."""
    return KeywordResearcher(docs, locale).research()


# =============================================================================
# Cannibalization
# =============================================================================

def normalize_keyword(keyword: Any) -> str:
    """Case- and whitespace-insensitive form of a keyword entry.

    Entries may be plain strings or ``{"keyword": ...}`` objects.
    """
    if isinstance(keyword, dict):
        keyword = keyword.get('keyword')
    if not isinstance(keyword, str):
        return ""
    return _WHITESPACE.sub(' ', keyword.strip().lower())


def document_keywords(doc: DocRecord) -> List[str]:
    """Primary then secondary keywords of a document, without duplicates."""
    keywords = []
    for entry in [doc.focus_keyword, *(doc.focus_keywords or [])]:
        keyword = normalize_keyword(entry)
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


def detect_cannibalization(
    docs: Sequence[DocRecord],
    recent_scores: Optional[Mapping[str, int]] = None,
) -> CannibalizationReport:
    """Group documents targeting the same keyword.

    Args:
        docs: Corpus documents
        recent_scores: Latest score per ``collection::id`` key

    Returns:
        CannibalizationReport, largest conflicts first
    """
    scores = recent_scores or {}
    keyword_map: Dict[str, List[DocRecord]] = {}
    for doc in docs:
        for keyword in document_keywords(doc):
            keyword_map.setdefault(keyword, []).append(doc)

    conflicts = []
    affected = set()
    for keyword, pages in keyword_map.items():
        if len(pages) < 2:
            continue
        conflicts.append(CannibalizationConflict(
            keyword=keyword,
            pages=[
                ConflictPage(
                    id=doc.id,
                    title=doc.title,
                    slug=doc.slug,
                    collection=doc.collection,
                    score=scores.get(doc.key, 0) or 0,
                )
                for doc in pages
            ],
        ))
        affected.update(doc.key for doc in pages)

    conflicts.sort(key=lambda c: (-len(c.pages), c.keyword))

    stats = {'total_conflicts': len(conflicts), 'total_affected_pages': len(affected)}
    if conflicts:
        logger.info(f"Found {len(conflicts)} cannibalization conflict(s)")
    return CannibalizationReport(conflicts=conflicts, stats=stats)


def find_keyword_usage(
    keyword: Any,
    docs: Sequence[DocRecord],
    exclude_id: Any = None,
) -> List[KeywordUsage]:
    """Documents already targeting a keyword, as primary or secondary keyword.

    Args:
        keyword: Keyword considered for a document
        docs: Corpus documents
        exclude_id: Id of the document being edited; ids are compared as strings

    Returns:
        Matching documents in corpus order; empty for an empty keyword
    """
    target = normalize_keyword(keyword)
    if not target:
        return []
    excluded = None if exclude_id is None else str(exclude_id)
    return [
        KeywordUsage(id=doc.id, title=doc.title, slug=doc.slug, collection=doc.collection)
        for doc in docs
        if (excluded is None or str(doc.id) != excluded) and target in document_keywords(doc)
    ]
