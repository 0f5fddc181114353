"""Data models for the SEO content engine."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from seo_engine.config import AnalysisThresholds, default_thresholds
from seo_engine.constants import CATEGORY_WEIGHTS


class CheckStatus(str, Enum):
    """Verdict of a single check."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class CheckCategory(str, Enum):
    """Importance of a check; drives its default weight."""
    CRITICAL = "critical"
    IMPORTANT = "important"
    BONUS = "bonus"

    @property
    def default_weight(self) -> int:
        return CATEGORY_WEIGHTS[self.value]


class RuleGroup(str, Enum):
    """Rule groups that can be enabled or disabled by name."""
    TITLE = "title"
    META_DESCRIPTION = "meta-description"
    URL = "url"
    HEADINGS = "headings"
    CONTENT = "content"
    IMAGES = "images"
    LINKING = "linking"
    SOCIAL = "social"
    SCHEMA = "schema"
    READABILITY = "readability"
    QUALITY = "quality"
    SECONDARY_KEYWORDS = "secondary-keywords"
    CORNERSTONE = "cornerstone"
    FRESHNESS = "freshness"
    TECHNICAL = "technical"
    ACCESSIBILITY = "accessibility"
    ECOMMERCE = "ecommerce"

    @classmethod
    def parse(cls, name: str) -> Optional["RuleGroup"]:
        """Return the group for a name, or None when the name is unknown."""
        try:
            return cls(name)
        except ValueError:
            return None


class SeoLevel(str, Enum):
    """Qualitative bucket of a score."""
    POOR = "poor"
    OK = "ok"
    GOOD = "good"
    EXCELLENT = "excellent"


class PageType(str, Enum):
    """Page classification inferred from the slug."""
    HOME = "home"
    LEGAL = "legal"
    CONTACT = "contact"
    FORM = "form"
    BLOG = "blog"
    SERVICE = "service"
    LOCAL_SEO = "local-seo"
    RESOURCE = "resource"
    AGENCY = "agency"
    GENERIC = "generic"


@dataclass(frozen=True)
class Finding:
    """One check's verdict."""

    id: str
    label: str
    status: CheckStatus
    message: str
    category: CheckCategory
    weight: float
    group: RuleGroup
    tip: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            'id': self.id,
            'label': self.label,
            'status': self.status.value,
            'message': self.message,
            'category': self.category.value,
            'weight': self.weight,
            'group': self.group.value,
        }
        if self.tip:
            result['tip'] = self.tip
        return result


@dataclass
class AnalysisResult:
    """Score, level and the findings they were computed from."""

    score: int
    level: SeoLevel
    checks: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'level': self.level.value,
            'checks': [check.to_dict() for check in self.checks],
        }

    def by_group(self) -> dict[str, list[Finding]]:
        groups: dict[str, list[Finding]] = {}
        for check in self.checks:
            groups.setdefault(check.group.value, []).append(check)
        return groups


@dataclass(frozen=True)
class SeoInput:
    """Flattened, read-only view of one document under analysis.

    Rich-text fields hold the raw editor trees (dicts with ``root`` or
    ``children``); they are only read, never modified.
    """

    meta_title: str = ""
    meta_description: str = ""
    meta_image: Any = None
    slug: str = ""
    focus_keyword: str = ""
    focus_keywords: tuple[str, ...] = ()
    hero_title: str = ""
    hero_rich_text: Any = None
    hero_links: tuple = ()
    hero_media: Any = None
    blocks: tuple = ()
    content: Any = None
    is_post: bool = False
    is_cornerstone: bool = False
    updated_at: Optional[str] = None
    content_last_reviewed: Optional[str] = None
    is_global: bool = False
    is_product: bool = False
    canonical_url: Optional[str] = None
    robots_meta: Optional[str] = None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ExtractedLink:
    url: str
    text: str


@dataclass(frozen=True)
class ExtractedImage:
    alt: str
    filename: str = ""


@dataclass(frozen=True)
class ListInfo:
    list_type: str
    items: int


@dataclass(frozen=True)
class LinkRef:
    """Internal link resolved to a comparable slug."""
    url: str
    slug: str
    text: str


@dataclass
class AnalysisContext:
    """Everything the rules need, derived once from a SeoInput."""

    input: SeoInput
    locale: str
    full_text: str
    normalized_text: str
    word_count: int
    sentences: list[str]
    headings: list[Heading]
    links: list[ExtractedLink]
    images: list[ExtractedImage]
    lists: list[ListInfo]
    page_type: PageType
    normalized_keyword: str
    secondary_normalized_keywords: list[str]
    now: datetime
    thresholds: AnalysisThresholds = field(default_factory=lambda: default_thresholds)
    site_name: str = ""
    site_url: Optional[str] = None

    @property
    def images_total(self) -> int:
        return len(self.images)

    @property
    def images_with_alt(self) -> int:
        return sum(1 for image in self.images if image.alt)

    @property
    def rich_text_sources(self) -> list:
        """Rich-text trees that make up the body, in reading order."""
        sources = []
        if self.input.hero_rich_text:
            sources.append(self.input.hero_rich_text)
        if self.input.content:
            sources.append(self.input.content)
        for block in self.input.blocks:
            if not isinstance(block, dict):
                continue
            if block.get('richText'):
                sources.append(block['richText'])
            for column in block.get('columns') or []:
                if isinstance(column, dict) and column.get('richText'):
                    sources.append(column['richText'])
        return sources


# =============================================================================
# Corpus models
# =============================================================================

@dataclass
class DocRecord:
    """One fetched document, as seen by the corpus analyzers."""

    id: Any
    title: str
    slug: str
    collection: str
    focus_keyword: str = ""
    full_text: str = ""
    word_count: int = 0
    focus_keywords: list[str] = field(default_factory=list)
    links: list[LinkRef] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.collection}::{self.id}"


@dataclass
class GraphNode:
    slug: str
    title: str
    collection: str
    id: Any = None
    in_degree: int = 0
    out_degree: int = 0
    is_orphan: bool = False
    is_hub: bool = False


@dataclass
class GraphEdge:
    source: str
    target: str
    anchor_text: str = ""


@dataclass
class LinkGraph:
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    stats: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class IncomingLink:
    slug: str
    anchor_text: str = ""


@dataclass
class PageLinkInfo:
    """A page flagged by the sitemap audit."""
    id: Any
    title: str
    slug: str
    collection: str
    incoming_count: int = 0
    outgoing_count: int = 0
    incoming_from: list[IncomingLink] = field(default_factory=list)


@dataclass
class BrokenLink:
    source_id: Any
    source_title: str
    source_slug: str
    target_url: str
    target_slug: str
    collection: str
    anchor_text: str = ""
    suggested_slug: Optional[str] = None


@dataclass
class SitemapAudit:
    orphan_pages: list[PageLinkInfo]
    weak_pages: list[PageLinkInfo]
    link_hubs: list[PageLinkInfo]
    broken_links: list[BrokenLink]
    stats: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Redirect:
    from_path: str
    to_path: str = ""


@dataclass
class RedirectPlan:
    """Redirect needed after a slug change.

    ``exists`` is set when the same redirect is already stored;
    ``chain_warnings`` lists existing redirects the new one would chain with.
    """
    redirect: Redirect
    exists: bool = False
    chain_warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class SuggestionType(str, Enum):
    UNUSED = "unused"
    TRENDING = "trending"
    RELATED = "related"
    LONG_TAIL = "long-tail"


@dataclass
class KeywordSuggestion:
    keyword: str
    type: SuggestionType
    score: int
    frequency: int
    currently_used_by: list[str] = field(default_factory=list)
    suggested_for: list[str] = field(default_factory=list)


@dataclass
class KeywordResearchResult:
    suggestions: list[KeywordSuggestion]
    stats: dict[str, int]

    def to_dict(self) -> dict:
        return {
            'suggestions': [
                {**asdict(s), 'type': s.type.value} for s in self.suggestions
            ],
            'stats': dict(self.stats),
        }


@dataclass
class ConflictPage:
    id: Any
    title: str
    slug: str
    collection: str
    score: int = 0


@dataclass
class CannibalizationConflict:
    keyword: str
    pages: list[ConflictPage]


@dataclass
class CannibalizationReport:
    conflicts: list[CannibalizationConflict]
    stats: dict[str, int]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class KeywordUsage:
    """Document already targeting a keyword."""
    id: Any
    title: str
    slug: str
    collection: str


@dataclass
class LinkSuggestion:
    """Internal link target proposed for a source document."""
    id: Any
    title: str
    slug: str
    collection: str
    score: int
    match_type: str
    context: str = ""


@dataclass
class ExternalLinkResult:
    url: str
    status: Optional[int]
    ok: bool
    source_pages: list[str] = field(default_factory=list)
    error: Optional[str] = None
    redirected_to: Optional[str] = None


@dataclass
class ExternalLinkReport:
    results: list[ExternalLinkResult]
    stats: dict[str, int]
    checked_at: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AuditEntry:
    """One document row of the site audit."""
    id: Any
    title: str
    slug: str
    collection: str
    score: int
    level: str
    focus_keyword: str = ""
    meta_title: str = ""
    meta_description: str = ""
    word_count: int = 0
    readability_score: int = 0
    previous_score: Optional[int] = None

    @property
    def key(self) -> str:
        return f"{self.collection}::{self.id}"


@dataclass
class SiteAudit:
    entries: list[AuditEntry]
    stats: dict[str, int]

    def to_dict(self) -> dict:
        return asdict(self)
