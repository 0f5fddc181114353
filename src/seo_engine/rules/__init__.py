"""Rule groups of the on-page analyzer.

Each group is a plain function taking the shared AnalysisContext and
returning a list of findings. RULE_REGISTRY lists them in the order the
analyzer runs them.
"""

from typing import Callable, Dict, List

from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.accessibility import check_accessibility
from seo_engine.rules.content import check_content
from seo_engine.rules.cornerstone import check_cornerstone
from seo_engine.rules.ecommerce import check_ecommerce
from seo_engine.rules.freshness import check_freshness
from seo_engine.rules.headings import check_headings
from seo_engine.rules.images import check_images
from seo_engine.rules.linking import check_linking
from seo_engine.rules.meta_description import check_meta_description
from seo_engine.rules.quality import check_quality
from seo_engine.rules.readability import check_readability
from seo_engine.rules.schema import check_schema
from seo_engine.rules.secondary_keywords import check_secondary_keywords
from seo_engine.rules.social import check_social
from seo_engine.rules.technical import check_technical
from seo_engine.rules.title import check_title
from seo_engine.rules.url import check_url

RuleFunction = Callable[[AnalysisContext], List[Finding]]

RULE_REGISTRY: Dict[RuleGroup, RuleFunction] = {
    RuleGroup.TITLE: check_title,
    RuleGroup.META_DESCRIPTION: check_meta_description,
    RuleGroup.URL: check_url,
    RuleGroup.HEADINGS: check_headings,
    RuleGroup.CONTENT: check_content,
    RuleGroup.IMAGES: check_images,
    RuleGroup.LINKING: check_linking,
    RuleGroup.SOCIAL: check_social,
    RuleGroup.SCHEMA: check_schema,
    RuleGroup.READABILITY: check_readability,
    RuleGroup.QUALITY: check_quality,
    RuleGroup.SECONDARY_KEYWORDS: check_secondary_keywords,
    RuleGroup.CORNERSTONE: check_cornerstone,
    RuleGroup.FRESHNESS: check_freshness,
    RuleGroup.TECHNICAL: check_technical,
    RuleGroup.ACCESSIBILITY: check_accessibility,
    RuleGroup.ECOMMERCE: check_ecommerce,
}

__all__ = ["RULE_REGISTRY", "RuleFunction"]
