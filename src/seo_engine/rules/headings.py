"""Heading structure checks (H1-H6)."""

from functools import partial
from typing import List

from seo_engine.lexical import check_heading_hierarchy, keyword_matches_text
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.HEADINGS)


def check_headings(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    keyword = ctx.normalized_keyword
    h1s = [h for h in ctx.headings if h.level == 1]

    if not h1s:
        checks.append(_finding(
            'h1-missing', "H1 heading", FAIL, "The page has no H1 heading.", IMPORTANT,
            tip="Add exactly one H1 that states the topic of the page.",
        ))
    elif len(h1s) > 1:
        checks.append(_finding(
            'h1-unique', "Single H1", WARNING,
            f"The page has {len(h1s)} H1 headings; keep only one.", IMPORTANT,
            tip="Turn the extra H1 headings into H2.",
        ))
    else:
        checks.append(_finding(
            'h1-unique', "Single H1", PASS, "The page has exactly one H1.", IMPORTANT,
        ))

    if keyword:
        h1_text = ' '.join(normalize_for_comparison(h.text) for h in h1s)
        present = keyword_matches_text(keyword, h1_text)
        checks.append(_finding(
            'h1-keyword', "Keyword in H1", pass_or(present),
            "The H1 contains the focus keyword." if present
            else "The H1 does not contain the focus keyword.",
            IMPORTANT,
        ))

    ordered = check_heading_hierarchy(ctx.headings)
    checks.append(_finding(
        'heading-hierarchy', "Heading hierarchy", pass_or(ordered),
        "Heading levels follow each other without gaps." if ordered
        else "A heading level is skipped (for example H2 followed by H4).",
        IMPORTANT, tip="Never skip a level when going down the outline.",
    ))

    h2s = [h for h in ctx.headings if h.level == 2]
    if keyword and h2s:
        present = any(keyword_matches_text(keyword, normalize_for_comparison(h.text)) for h in h2s)
        checks.append(_finding(
            'h2-keyword', "Keyword in H2", pass_or(present),
            "At least one H2 contains the focus keyword." if present
            else "No H2 contains the focus keyword.",
            IMPORTANT, tip="Reuse the keyword or a variant in one subheading.",
        ))

    words_per_heading = ctx.thresholds.words_per_heading
    if ctx.word_count > words_per_heading:
        expected = ctx.word_count // words_per_heading
        subheadings = sum(1 for h in ctx.headings if h.level != 1)
        enough = subheadings >= expected
        checks.append(_finding(
            'heading-frequency', "Subheading frequency", pass_or(enough),
            f"{subheadings} subheadings for {ctx.word_count} words." if enough
            else f"Only {subheadings} subheadings for {ctx.word_count} words "
                 f"(expected at least {expected}).",
            BONUS, tip=f"Add a subheading roughly every {words_per_heading} words.",
        ))

    if ctx.input.meta_title and h1s:
        h1 = normalize_for_comparison(h1s[0].text)
        same = bool(h1) and h1 == normalize_for_comparison(ctx.input.meta_title)
        checks.append(_finding(
            'h1-title-different', "H1 differs from meta title", pass_or(not same),
            "The H1 repeats the meta title word for word." if same
            else "The H1 and the meta title are different.",
            IMPORTANT, weight=1,
            tip="Keep the brand in the title and make the H1 more descriptive.",
        ))

    return checks
