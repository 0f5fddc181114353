"""Content quality checks: filler text and substance."""

from functools import partial
from typing import List

from seo_engine.constants import FILLER_PATTERNS
from seo_engine.lexical import find_repeated_block
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import CRITICAL, FAIL, PASS, WARNING, finding

_finding = partial(finding, RuleGroup.QUALITY)


def check_quality(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds

    filler = (
        find_repeated_block(ctx.full_text) is not None
        or any(pattern.search(ctx.full_text) for pattern in FILLER_PATTERNS)
    )
    checks.append(_finding(
        'quality-no-duplicate', "Original content", FAIL if filler else PASS,
        "Repeated blocks or filler text were found." if filler
        else "No repeated block or filler text.",
        CRITICAL, tip="Remove duplicated passages and template text.",
    ))

    words = ctx.word_count
    if words < thresholds.quality_min_words:
        status, message = FAIL, f"Only {words} words: not enough substance to rank."
    elif words < thresholds.quality_substantial_words:
        status, message = WARNING, f"{words} words: the content is light."
    else:
        status, message = PASS, f"{words} words of substantial content."
    checks.append(_finding(
        'quality-substantial', "Substantial content", status, message, CRITICAL,
        tip=f"Write at least {thresholds.quality_substantial_words} words of useful content.",
    ))

    return checks
