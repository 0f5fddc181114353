# src/seo_engine/scorer.py
"""Weighted scoring of analysis findings."""

from typing import Dict, Iterable, List, Mapping, Optional

from seo_engine.constants import SCORE_EXCELLENT, SCORE_GOOD, SCORE_OK, WARNING_MULTIPLIER
from seo_engine.lexical import js_round
from seo_engine.models import CheckStatus, Finding, SeoLevel

# Share of a finding's weight earned per status
DEFAULT_STATUS_MULTIPLIERS: Dict[CheckStatus, float] = {
    CheckStatus.PASS: 1.0,
    CheckStatus.WARNING: WARNING_MULTIPLIER,
    CheckStatus.FAIL: 0.0,
}


def effective_weight(check: Finding, override_weights: Optional[Mapping[str, float]] = None) -> float:
    """Weight of a finding, replaced by its group's override when one is set."""
    if override_weights:
        override = override_weights.get(check.group.value)
        if override is not None:
            return override
    return check.weight


def calculate_score(
    checks: Iterable[Finding],
    override_weights: Optional[Mapping[str, float]] = None,
    status_multipliers: Optional[Mapping[CheckStatus, float]] = None,
) -> int:
    """Score findings on a 0-100 scale.

    Args:
        checks: Findings of the enabled rule groups
        override_weights: Group name to weight, replacing per-check weights
        status_multipliers: Share of the weight earned per status

    Returns:
        Rounded percentage of earned weight; 0 when there is nothing to score
    """
    multipliers = status_multipliers or DEFAULT_STATUS_MULTIPLIERS
    earned = 0.0
    maximum = 0.0
    for check in checks:
        weight = effective_weight(check, override_weights)
        maximum += weight
        earned += weight * multipliers.get(check.status, 0.0)

    if maximum <= 0:
        return 0
    return max(0, min(100, js_round(earned / maximum * 100)))


def get_level(score: int) -> SeoLevel:
    if score >= SCORE_EXCELLENT:
        return SeoLevel.EXCELLENT
    if score >= SCORE_GOOD:
        return SeoLevel.GOOD
    if score >= SCORE_OK:
        return SeoLevel.OK
    return SeoLevel.POOR


def summarize(checks: List[Finding]) -> Dict[str, int]:
    """Count findings per status."""
    summary = {status.value: 0 for status in CheckStatus}
    for check in checks:
        summary[check.status.value] += 1
    return summary
