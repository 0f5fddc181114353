"""Content freshness and decay checks.

Ages are whole days between the document dates and the analysis
snapshot ``ctx.now``; the wall clock is never read here.
"""

import logging
import re
from datetime import datetime, timezone
from functools import partial
from typing import List, Optional

from seo_engine.locales import all_evergreen_slugs
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, FAIL, IMPORTANT, PASS, WARNING, finding

logger = logging.getLogger(__name__)

_finding = partial(finding, RuleGroup.FRESHNESS)

_YEAR_PATTERN = re.compile(r'\b(20[0-2][0-9])\b')

_AGE_WEIGHT = 3
_REVIEW_WEIGHT = 2
_THIN_AGING_WEIGHT = 3


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        logger.debug(f"Unparseable date: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_since(value: Optional[str], now: datetime) -> Optional[int]:
    parsed = parse_date(value)
    if parsed is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return int((now - parsed).total_seconds() // 86400)


def is_evergreen(slug: Optional[str]) -> bool:
    if not slug:
        return False
    return any(slug == s or slug.endswith(f'/{s}') for s in all_evergreen_slugs())


def _age_finding(ctx: AnalysisContext, days: int, evergreen: bool) -> Finding:
    thresholds = ctx.thresholds
    if evergreen:
        stale = days > thresholds.freshness_evergreen_warn_days
        return _finding(
            'freshness-age', "Content age", WARNING if stale else PASS,
            f"Last updated {days} days ago." if not stale
            else f"This reference page has not been updated for {days} days.",
            BONUS, tip="Check that the page is still accurate.",
        )
    if days > thresholds.freshness_fail_days:
        status, message = FAIL, f"Last updated {days} days ago: the content is likely outdated."
    elif days > thresholds.freshness_warn_days:
        status, message = WARNING, f"Last updated {days} days ago: consider a refresh."
    else:
        status, message = PASS, f"Last updated {days} days ago."
    return _finding(
        'freshness-age', "Content age", status, message, IMPORTANT, weight=_AGE_WEIGHT,
        tip="Update figures, examples and links, then republish.",
    )


def check_freshness(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds
    evergreen = is_evergreen(ctx.input.slug)

    days = days_since(ctx.input.updated_at, ctx.now)
    if days is not None:
        checks.append(_age_finding(ctx, days, evergreen))

    reviewed = days_since(ctx.input.content_last_reviewed, ctx.now)
    if reviewed is not None:
        overdue = reviewed > thresholds.freshness_review_warn_days
        checks.append(_finding(
            'freshness-reviewed', "Content review", WARNING if overdue else PASS,
            f"Last reviewed {reviewed} days ago.", BONUS, weight=_REVIEW_WEIGHT,
            tip="Schedule an editorial review.",
        ))

    current_year = ctx.now.year
    last_year = current_year - 1
    text = ctx.full_text
    mentions_current = str(current_year) in text
    mentions_last = str(last_year) in text
    older = [int(year) for year in _YEAR_PATTERN.findall(text) if int(year) < last_year]

    if older and not mentions_current and not mentions_last:
        checks.append(_finding(
            'freshness-year-ref', "Year references", WARNING,
            f"The content mentions {min(older)} but neither {last_year} nor {current_year}.",
            IMPORTANT, tip="Update dated statements or make them timeless.",
        ))
    elif mentions_current:
        checks.append(_finding(
            'freshness-year-ref', "Year references", PASS,
            f"The content mentions {current_year}.", IMPORTANT,
        ))

    if (not evergreen and ctx.word_count < thresholds.thin_aging_words
            and days is not None and days > thresholds.freshness_warn_days):
        checks.append(_finding(
            'freshness-thin-aging', "Thin and aging", FAIL,
            f"Only {ctx.word_count} words and not updated for {days} days.",
            IMPORTANT, weight=_THIN_AGING_WEIGHT,
            tip="Expand the page or merge it into a stronger one.",
        ))

    return checks
