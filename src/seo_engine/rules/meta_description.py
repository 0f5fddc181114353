"""Meta description checks."""

from functools import partial
from typing import List

from seo_engine.lexical import keyword_matches_text
from seo_engine.locales import get_lexicon
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.META_DESCRIPTION)


def has_call_to_action(description: str, locale: str) -> bool:
    """Action verb, numbered promise ("5 steps") or question word."""
    lexicon = get_lexicon(locale)
    lowered = description.lower()
    if any(verb in lowered for verb in lexicon.action_verbs):
        return True
    if lexicon.numeric_cta_pattern.search(description):
        return True
    return bool(lexicon.cta_question_pattern and lexicon.cta_question_pattern.search(description))


def check_meta_description(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds
    description = ctx.input.meta_description or ""

    if not description.strip():
        return [_finding(
            'meta-desc-missing', "Meta description", FAIL,
            "No meta description is set.", CRITICAL,
            tip="Summarize the page in 120 to 160 characters and include the focus keyword.",
        )]

    length = len(description)
    if length < thresholds.meta_description_min:
        status = WARNING
        message = (f"Meta description is too short ({length} characters, "
                   f"minimum {thresholds.meta_description_min}).")
    elif length > thresholds.meta_description_max:
        status = WARNING
        message = (f"Meta description is too long ({length} characters, "
                   f"maximum {thresholds.meta_description_max}); it will be truncated.")
    else:
        status = PASS
        message = f"Meta description length is good ({length} characters)."
    checks.append(_finding(
        'meta-desc-length', "Meta description length", status, message, CRITICAL,
        tip="Aim for 120 to 160 characters.",
    ))

    keyword = ctx.normalized_keyword
    if keyword:
        display = ctx.input.focus_keyword or keyword
        present = keyword_matches_text(keyword, normalize_for_comparison(description))
        checks.append(_finding(
            'meta-desc-keyword', "Keyword in meta description", pass_or(present),
            f'The meta description contains "{display}".' if present
            else f'The meta description does not contain "{display}".',
            CRITICAL, tip="Search engines bold the keyword in results; include it.",
        ))

    has_cta = has_call_to_action(description, ctx.locale)
    checks.append(_finding(
        'meta-desc-cta', "Call to action", pass_or(has_cta),
        "The meta description contains an incentive to click." if has_cta
        else "The meta description has no call to action.",
        IMPORTANT,
        tip='Start with an imperative verb (Discover, Get, Try) or promise a number ("5 reasons to...").',
    ))

    return checks
