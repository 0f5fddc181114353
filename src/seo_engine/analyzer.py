"""On-page SEO analyzer: runs the enabled rule groups and scores them."""

import logging
from datetime import datetime
from typing import FrozenSet, List, Optional

from seo_engine.config import SeoConfig
from seo_engine.context import build_context
from seo_engine.models import AnalysisContext, AnalysisResult, Finding, RuleGroup, SeoInput
from seo_engine.rules import RULE_REGISTRY
from seo_engine.scorer import calculate_score, get_level

logger = logging.getLogger(__name__)


class SeoAnalyzer:
    """Analyzes one document against the rule groups enabled for a site."""

    def __init__(self, config: Optional[SeoConfig] = None):
        """Initialize the analyzer.

        Args:
            config: Site configuration; defaults apply when omitted
        """
        self.config = config or SeoConfig()
        self.disabled_groups = self._parse_disabled(self.config.disabled_rules)

    @staticmethod
    def _parse_disabled(names: List[str]) -> FrozenSet[RuleGroup]:
        groups = set()
        for name in names or []:
            group = RuleGroup.parse(name)
            if group is None:
                logger.debug(f"Ignoring unknown rule group {name!r}")
                continue
            groups.add(group)
        return frozenset(groups)

    def enabled_groups(self, data: SeoInput) -> List[RuleGroup]:
        """Rule groups that apply to this document, in evaluation order."""
        groups = []
        for group in RULE_REGISTRY:
            if group in self.disabled_groups:
                continue
            if group == RuleGroup.ECOMMERCE and not data.is_product:
                continue
            groups.append(group)
        return groups

    def run_rules(self, ctx: AnalysisContext) -> List[Finding]:
        """Evaluate every enabled group; a failing group contributes nothing."""
        checks: List[Finding] = []
        for group in self.enabled_groups(ctx.input):
            try:
                checks.extend(RULE_REGISTRY[group](ctx))
            except Exception as e:
                logger.warning(f"Rule group {group.value} failed: {e}")
        return checks

    def analyze(self, data: SeoInput, now: Optional[datetime] = None) -> AnalysisResult:
        """Analyze a document.

        Args:
            data: Document under analysis
            now: Reference time for freshness checks

        Returns:
            AnalysisResult with score, level and every finding
        """
        ctx = build_context(data, self.config, now=now)
        checks = self.run_rules(ctx)
        score = calculate_score(checks, self.config.override_weights)

        logger.debug(
            f"Analyzed /{data.slug or ''}: {len(checks)} checks, score {score}"
        )
        return AnalysisResult(score=score, level=get_level(score), checks=checks)


def analyze(data: SeoInput, config: Optional[SeoConfig] = None,
            now: Optional[datetime] = None) -> AnalysisResult:
    """Analyze a document with a one-off analyzer."""
    return SeoAnalyzer(config).analyze(data, now=now)
