"""Reduced keyword checks for each secondary keyword."""

from functools import partial
from typing import List

from seo_engine.lexical import count_overlapping, count_words
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.SECONDARY_KEYWORDS)


def _display_keyword(ctx: AnalysisContext, normalized: str) -> str:
    for keyword in ctx.input.focus_keywords:
        if isinstance(keyword, str) and normalize_for_comparison(keyword.strip()) == normalized:
            return keyword
    return normalized


def check_secondary_keywords(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    keywords = ctx.secondary_normalized_keywords
    if not keywords:
        return checks

    title = normalize_for_comparison(ctx.input.meta_title)
    description = normalize_for_comparison(ctx.input.meta_description)
    subheadings = [
        normalize_for_comparison(h.text) for h in ctx.headings if h.level in (2, 3)
    ]

    for i, keyword in enumerate(keywords):
        shown = _display_keyword(ctx, keyword)
        suffix = f" (#{i + 1})" if len(keywords) > 1 else ""

        in_title = keyword in title
        checks.append(_finding(
            f'secondary-kw-title-{i}', f"Secondary keyword in title{suffix}", pass_or(in_title),
            f'"{shown}" appears in the meta title.' if in_title
            else f'"{shown}" is missing from the meta title.',
            BONUS,
        ))

        in_description = keyword in description
        checks.append(_finding(
            f'secondary-kw-desc-{i}', f"Secondary keyword in description{suffix}",
            pass_or(in_description),
            f'"{shown}" appears in the meta description.' if in_description
            else f'"{shown}" is missing from the meta description.',
            BONUS,
        ))

        if keyword in ctx.normalized_text and ctx.word_count > 0:
            count = count_overlapping(keyword, ctx.normalized_text)
            density = count * count_words(keyword) / ctx.word_count * 100
            checks.append(_finding(
                f'secondary-kw-content-{i}', f"Secondary keyword in content{suffix}", PASS,
                f'"{shown}" appears {count} time(s) ({density:.1f}%).', BONUS,
            ))
        else:
            checks.append(_finding(
                f'secondary-kw-content-{i}', f"Secondary keyword in content{suffix}", WARNING,
                f'"{shown}" does not appear in the content.', BONUS,
            ))

        in_heading = any(keyword in heading for heading in subheadings)
        checks.append(_finding(
            f'secondary-kw-heading-{i}', f"Secondary keyword in H2/H3{suffix}", pass_or(in_heading),
            f'"{shown}" appears in an H2 or H3.' if in_heading
            else f'Add "{shown}" to an H2 or H3 subheading.',
            BONUS,
        ))

    return checks
