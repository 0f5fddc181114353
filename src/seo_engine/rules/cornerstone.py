"""Pillar content checks, run only for documents flagged as cornerstone."""

from functools import partial
from typing import List

from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import (
    CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding, is_internal_link, pass_or,
)

_finding = partial(finding, RuleGroup.CORNERSTONE)

_IMPORTANT_WEIGHT = 4
_CRITICAL_WEIGHT = 5


def check_cornerstone(ctx: AnalysisContext) -> List[Finding]:
    if not ctx.input.is_cornerstone:
        return []

    checks = []
    thresholds = ctx.thresholds

    words = ctx.word_count
    checks.append(_finding(
        'cornerstone-wordcount', "Pillar length", pass_or(words >= thresholds.cornerstone_min_words),
        f"{words} words (pillar pages need at least {thresholds.cornerstone_min_words}).",
        IMPORTANT, weight=_IMPORTANT_WEIGHT,
        tip="Cover the topic in depth: pillar pages are the reference on their subject.",
    ))

    internal = sum(1 for link in ctx.links if is_internal_link(link.url))
    checks.append(_finding(
        'cornerstone-internal-links', "Pillar internal links",
        pass_or(internal >= thresholds.cornerstone_min_internal_links),
        f"{internal} internal link(s) (pillar pages need at least "
        f"{thresholds.cornerstone_min_internal_links}).",
        IMPORTANT, weight=_IMPORTANT_WEIGHT,
        tip="Link the pillar to every related article.",
    ))

    keyword = ctx.normalized_keyword
    checks.append(_finding(
        'cornerstone-focus-keyword', "Pillar focus keyword", PASS if keyword else FAIL,
        "A focus keyword is set." if keyword else "A pillar page must target a focus keyword.",
        CRITICAL, weight=_CRITICAL_WEIGHT,
    ))

    description = ctx.input.meta_description or ""
    length = len(description)
    if thresholds.meta_description_min <= length <= thresholds.meta_description_max:
        status, message = PASS, f"The meta description is {length} characters long."
    elif length:
        status, message = WARNING, (
            f"The meta description is {length} characters long; aim for "
            f"{thresholds.meta_description_min}-{thresholds.meta_description_max}."
        )
    else:
        status, message = FAIL, "A pillar page must have a meta description."
    checks.append(_finding(
        'cornerstone-meta-description', "Pillar meta description", status, message,
        CRITICAL, weight=_CRITICAL_WEIGHT,
    ))

    return checks
