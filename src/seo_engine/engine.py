# src/seo_engine/engine.py
"""Facade combining document analysis, corpus analyses and score history."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from seo_engine.analyzer import SeoAnalyzer
from seo_engine.cache import SeoCache
from seo_engine.config import SeoConfig
from seo_engine.constants import HOME_SLUG
from seo_engine.documents import (
    FetchedDoc,
    GLOBAL_PREFIX,
    build_doc_records,
    build_seo_input,
    extract_doc_text,
    string_field,
)
from seo_engine.history import ScoreHistoryDatabase, score_trend
from seo_engine.keyword_research import (
    detect_cannibalization,
    find_keyword_usage,
    normalize_keyword,
    research_keywords,
)
from seo_engine.lexical import count_words
from seo_engine.link_checker import ExternalLinkChecker, collect_external_urls
from seo_engine.link_graph import (
    audit_sitemap,
    build_link_graph,
    doc_slug_key,
    plan_slug_redirect,
    suggest_links,
)
from seo_engine.models import (
    AnalysisResult,
    CannibalizationReport,
    DocRecord,
    ExternalLinkReport,
    KeywordResearchResult,
    KeywordUsage,
    LinkGraph,
    LinkSuggestion,
    Redirect,
    RedirectPlan,
    SiteAudit,
    SitemapAudit,
)
from seo_engine.site_audit import build_audit_entry, summarize_site_audit
from seo_engine.text_extraction import normalize_slug_key

logger = logging.getLogger(__name__)


class SeoEngine:
    """Runs every analysis over one site's documents.

    Corpus-wide results are memoized in a ``SeoCache`` until
    ``document_changed`` is called.
    """

    def __init__(
        self,
        config: Optional[SeoConfig] = None,
        corpus: Optional[Sequence[FetchedDoc]] = None,
        redirects: Optional[Iterable[Redirect]] = None,
        history: Optional[ScoreHistoryDatabase] = None,
        cache: Optional[SeoCache] = None,
    ):
        """Initialize the engine.

        Args:
            config: Site configuration (defaults from the environment)
            corpus: Documents of the site
            redirects: Existing redirects, used by the sitemap audit
            history: Score history store; snapshots are skipped without one
            cache: Cache for corpus results (a private one when omitted)
        """
        self.config = config or SeoConfig.from_env()
        self.analyzer = SeoAnalyzer(self.config)
        self.corpus: List[FetchedDoc] = list(corpus or [])
        self.redirects = list(redirects or [])
        self.history = history
        self.cache = cache if cache is not None else SeoCache()
        self._records: Optional[List[DocRecord]] = None

    @property
    def records(self) -> List[DocRecord]:
        if self._records is None:
            self._records = build_doc_records(self.corpus)
        return self._records

    def _cached(self, key: str, compute: Callable[[], Any]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached
        value = compute()
        self.cache.set(key, value)
        return value

    def document_changed(self) -> None:
        """Forget derived corpus results after a document was written."""
        self._records = None
        self.cache.invalidate()

    # -------------------------------------------------------------------------
    # Single documents
    # -------------------------------------------------------------------------

    def analyze_document(
        self,
        raw_doc: Dict[str, Any],
        collection: str,
        record: bool = False,
        now: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Analyze one raw document.

        Args:
            raw_doc: Document as returned by the content store
            collection: Collection slug (or "global:<slug>" for globals)
            record: Store a score snapshot when a history store is set
            now: Reference time for freshness checks and the snapshot

        Returns:
            AnalysisResult
        """
        is_global = collection.startswith(GLOBAL_PREFIX)
        seo_input = build_seo_input(raw_doc, collection, is_global=is_global)
        result = self.analyzer.analyze(seo_input, now=now)

        document_id = raw_doc.get('id')
        if record and self.history is not None and document_id is not None:
            self.history.record_analysis(
                document_id,
                collection,
                result,
                focus_keyword=seo_input.focus_keyword,
                word_count=count_words(extract_doc_text(raw_doc)),
                now=now,
            )
        return result

    def analyze_corpus(self, record: bool = False,
                       now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Analyze every corpus document; one summary dict per document."""
        results = []
        for item in self.corpus:
            result = self.analyze_document(item.doc, item.collection, record=record, now=now)
            results.append({
                'id': item.doc.get('id'),
                'title': string_field(item.doc.get('title')),
                'slug': string_field(item.doc.get('slug')),
                'collection': item.collection,
                'score': result.score,
                'level': result.level.value,
                'result': result,
            })
        if record:
            self.document_changed()
        return results

    # -------------------------------------------------------------------------
    # Corpus analyses
    # -------------------------------------------------------------------------

    def link_graph(self) -> LinkGraph:
        return self._cached("link-graph", lambda: build_link_graph(self.records))

    def sitemap_audit(self, known_routes: Optional[Iterable[str]] = None) -> SitemapAudit:
        routes = sorted(known_routes or [])
        return self._cached(
            f"sitemap-audit::{','.join(routes)}",
            lambda: audit_sitemap(self.records, self.redirects, routes),
        )

    def keyword_research(self) -> KeywordResearchResult:
        locale = self.config.locale
        return self._cached(
            f"keyword-research::{locale}",
            lambda: research_keywords(self.records, locale),
        )

    def cannibalization(self) -> CannibalizationReport:
        def compute():
            recent_scores = self.history.get_recent_scores() if self.history is not None else {}
            return detect_cannibalization(self.records, recent_scores)

        return self._cached("cannibalization", compute)

    def site_audit(self, now: Optional[datetime] = None) -> SiteAudit:
        """Score every corpus document and aggregate the results, worst first."""
        def compute():
            entries = [
                build_audit_entry(
                    item.doc,
                    item.collection,
                    self.analyze_document(item.doc, item.collection, now=now),
                    self.config.locale,
                )
                for item in self.corpus
            ]
            previous = self.history.get_previous_scores() if self.history is not None else {}
            return summarize_site_audit(entries, previous)

        return self._cached("site-audit", compute)

    def check_keyword(self, keyword: str, exclude_id: Any = None) -> Dict[str, Any]:
        """Whether other documents already target a keyword.

        Raises:
            ValueError: If the keyword is empty
        """
        normalized = normalize_keyword(keyword)
        if not normalized:
            raise ValueError("Missing keyword")
        pages: List[KeywordUsage] = find_keyword_usage(normalized, self.records, exclude_id)
        return {'used': bool(pages), 'keyword': normalized, 'pages': pages}

    def find_document(self, slug: str, collection: Optional[str] = None) -> Optional[DocRecord]:
        key = normalize_slug_key(slug) or HOME_SLUG
        for doc in self.records:
            if collection and doc.collection != collection:
                continue
            if doc_slug_key(doc) == key:
                return doc
        return None

    def suggest_links(self, slug: str, collection: Optional[str] = None) -> List[LinkSuggestion]:
        """Internal link suggestions for the document with a given slug."""
        source = self.find_document(slug, collection)
        if source is None:
            logger.warning(f"No document with slug {slug!r}")
            return []
        return suggest_links(source, self.records)

    def slug_changed(self, old_slug: str, new_slug: str) -> Optional[RedirectPlan]:
        """Plan the redirect for a renamed document and add it to the site's redirects."""
        plan = plan_slug_redirect(old_slug, new_slug, self.redirects)
        if plan is not None and not plan.exists:
            self.redirects.append(plan.redirect)
            logger.info(f"Added redirect {plan.redirect.from_path} -> {plan.redirect.to_path}")
            self.document_changed()
        return plan

    def check_external_links(self, checker: Optional[ExternalLinkChecker] = None,
                             force_refresh: bool = False) -> ExternalLinkReport:
        """Check reachability of every external URL in the corpus."""
        checker = checker or ExternalLinkChecker()
        url_sources = collect_external_urls(
            ((item.collection, item.doc) for item in self.corpus),
            site_url=self.config.site_url,
        )
        return asyncio.run(checker.check_urls(url_sources, force_refresh=force_refresh))

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def score_history(self, document_id: Any, collection: str, limit: int = 30) -> Dict[str, Any]:
        """Chronological snapshots of a document and their trend."""
        if self.history is None:
            return {'history': [], 'trend': 'stable', 'score_delta': 0}
        history = self.history.get_history(document_id, collection, limit)
        trend, delta = score_trend(history)
        return {'history': history, 'trend': trend, 'score_delta': delta}
