"""Shared helpers for rule modules."""

from typing import Optional

from seo_engine.models import CheckCategory, CheckStatus, Finding, RuleGroup
from seo_engine.text_extraction import normalize_to_slug

PASS = CheckStatus.PASS
WARNING = CheckStatus.WARNING
FAIL = CheckStatus.FAIL

CRITICAL = CheckCategory.CRITICAL
IMPORTANT = CheckCategory.IMPORTANT
BONUS = CheckCategory.BONUS


def finding(
    group: RuleGroup,
    check_id: str,
    label: str,
    status: CheckStatus,
    message: str,
    category: CheckCategory,
    weight: Optional[float] = None,
    tip: Optional[str] = None,
) -> Finding:
    """Build a Finding; the weight defaults to the category weight.

    Tips are only kept on warnings and failures.
    """
    return Finding(
        id=check_id,
        label=label,
        status=status,
        message=message,
        category=category,
        weight=category.default_weight if weight is None else weight,
        group=group,
        tip=tip if status != PASS else None,
    )


def pass_or(condition: bool, otherwise: CheckStatus = WARNING) -> CheckStatus:
    return PASS if condition else otherwise


def percent(ratio: float) -> int:
    return int(ratio * 100 + 0.5)


def is_internal_link(url: str) -> bool:
    """Links to a page of the site; anchors, mailto, tel and absolute URLs are not."""
    url = (url or "").strip()
    return bool(url) and normalize_to_slug(url) is not None
