"""Rule-based SEO scoring, link graph audits and keyword research for CMS content."""

__version__ = "0.1.0"

from seo_engine.analyzer import SeoAnalyzer, analyze
from seo_engine.config import AnalysisThresholds, SeoConfig, default_thresholds, settings
from seo_engine.engine import SeoEngine
from seo_engine.history import ScoreHistoryDatabase
from seo_engine.keyword_research import (
    KeywordResearcher,
    detect_cannibalization,
    research_keywords,
)
from seo_engine.link_checker import ExternalLinkChecker, check_external_links
from seo_engine.link_graph import audit_sitemap, build_link_graph, suggest_links
from seo_engine.locale import resolve_analysis_locale
from seo_engine.models import (
    AnalysisResult,
    CannibalizationReport,
    CheckCategory,
    CheckStatus,
    DocRecord,
    ExternalLinkReport,
    Finding,
    KeywordResearchResult,
    LinkGraph,
    RuleGroup,
    SeoInput,
    SeoLevel,
    SitemapAudit,
)

__all__ = [
    "SeoAnalyzer",
    "analyze",
    "AnalysisThresholds",
    "SeoConfig",
    "default_thresholds",
    "settings",
    "SeoEngine",
    "ScoreHistoryDatabase",
    "KeywordResearcher",
    "detect_cannibalization",
    "research_keywords",
    "ExternalLinkChecker",
    "check_external_links",
    "audit_sitemap",
    "build_link_graph",
    "suggest_links",
    "resolve_analysis_locale",
    "AnalysisResult",
    "CannibalizationReport",
    "CheckCategory",
    "CheckStatus",
    "DocRecord",
    "ExternalLinkReport",
    "Finding",
    "KeywordResearchResult",
    "LinkGraph",
    "RuleGroup",
    "SeoInput",
    "SeoLevel",
    "SitemapAudit",
]
