"""Body content checks: length, keyword usage and structure."""

import re
from functools import partial
from typing import List

from seo_engine.constants import (
    DISTRIBUTION_MIN_WORDS,
    INTRO_CHAR_LIMIT,
    LISTS_EXPECTED_ABOVE_WORDS,
)
from seo_engine.lexical import count_keyword_occurrences, find_placeholders, keyword_matches_text
from seo_engine.models import AnalysisContext, Finding, PageType, RuleGroup
from seo_engine.rules.base import BONUS, CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.CONTENT)

_INTRO_SEGMENT_BREAK = re.compile(r'\.(?=\s|$)|\n')


def minimum_words(ctx: AnalysisContext) -> int:
    thresholds = ctx.thresholds
    if ctx.input.is_post:
        return thresholds.min_words_post
    if ctx.page_type in (PageType.FORM, PageType.CONTACT):
        return thresholds.min_words_form
    if ctx.page_type == PageType.LEGAL:
        return thresholds.min_words_legal
    return thresholds.min_words_generic


def _density_finding(ctx: AnalysisContext) -> Finding:
    thresholds = ctx.thresholds
    occurrences = count_keyword_occurrences(ctx.normalized_keyword, ctx.normalized_text, ctx.word_count)
    density = occurrences.effective_density
    shown = f"{density:.1f}%"

    if density > thresholds.keyword_stuffing_threshold:
        return _finding(
            'content-keyword-density', "Keyword density", FAIL,
            f"Keyword density is {shown}: the text is over-optimized (above "
            f"{thresholds.keyword_stuffing_threshold}%).",
            CRITICAL, tip="Replace some occurrences with synonyms or pronouns.",
        )
    if density > thresholds.keyword_density_max:
        return _finding(
            'content-keyword-density', "Keyword density", WARNING,
            f"Keyword density is {shown}, slightly above the {thresholds.keyword_density_max}% target.",
            IMPORTANT, tip="Use a few variants instead of repeating the exact keyword.",
        )
    if density >= thresholds.keyword_density_min:
        return _finding(
            'content-keyword-density', "Keyword density", PASS,
            f"Keyword density is {shown}.", IMPORTANT,
        )
    if occurrences.word_level_match:
        return _finding(
            'content-keyword-density', "Keyword density", WARNING,
            f"The words of the keyword appear separately (about {shown}) but rarely as a phrase.",
            IMPORTANT, tip="Use the exact keyword phrase a few more times.",
        )
    if occurrences.exact_count:
        return _finding(
            'content-keyword-density', "Keyword density", WARNING,
            f"Keyword density is low ({shown}, {occurrences.exact_count} occurrences).",
            IMPORTANT, tip=f"Aim for {thresholds.keyword_density_min}% to {thresholds.keyword_density_max}%.",
        )
    return _finding(
        'content-keyword-density', "Keyword density", FAIL,
        "The focus keyword never appears in the content.", IMPORTANT,
        tip="Use the focus keyword naturally in the body text.",
    )


def check_content(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds
    word_count = ctx.word_count
    keyword = ctx.normalized_keyword
    minimum = minimum_words(ctx)

    if word_count < thresholds.thin_content_words:
        status = FAIL
        message = f"Only {word_count} words: the content is too thin."
    elif word_count < minimum:
        status = WARNING
        message = f"{word_count} words; at least {minimum} are recommended for this page type."
    else:
        status = PASS
        message = f"{word_count} words."
    checks.append(_finding(
        'content-wordcount', "Word count", status, message, IMPORTANT,
        tip=f"Expand the content to at least {minimum} words.",
    ))

    if keyword and ctx.full_text.strip():
        intro = normalize_for_comparison(ctx.full_text.strip()[:INTRO_CHAR_LIMIT])
        first_segments = ' '.join(_INTRO_SEGMENT_BREAK.split(intro)[:2])
        present = keyword_matches_text(keyword, first_segments)
        checks.append(_finding(
            'content-keyword-intro', "Keyword in introduction", PASS if present else WARNING,
            "The keyword appears in the introduction." if present
            else "The keyword is missing from the first sentences.",
            IMPORTANT, tip="Mention the focus keyword in the first paragraph.",
        ))

    if keyword and word_count > 0:
        checks.append(_density_finding(ctx))

    placeholders = find_placeholders(ctx.full_text)
    checks.append(_finding(
        'content-no-placeholder', "Placeholder text",
        FAIL if placeholders else PASS,
        f"Placeholder text found: {placeholders[0]}." if placeholders
        else "No placeholder text.",
        CRITICAL, tip="Replace every placeholder before publishing.",
    ))

    if 0 < word_count <= thresholds.thin_content_words:
        checks.append(_finding(
            'content-thin', "Thin content", WARNING,
            f"The page has only {word_count} words.", IMPORTANT,
            tip="Thin pages rarely rank; add substance or merge the page.",
        ))
    elif word_count > thresholds.thin_content_words:
        checks.append(_finding(
            'content-thin', "Thin content", PASS, "The page is not thin.", IMPORTANT,
        ))

    if keyword and word_count >= DISTRIBUTION_MIN_WORDS:
        text = ctx.normalized_text
        third = len(text) // 3
        tiers = [text[:third], text[third:third * 2], text[third * 2:]]
        covered = sum(1 for tier in tiers if keyword_matches_text(keyword, tier))
        if covered >= 2:
            status, message = PASS, f"The keyword is spread across {covered} thirds of the text."
        elif covered == 1:
            status, message = WARNING, "The keyword is concentrated in a single third of the text."
        else:
            status, message = FAIL, "The keyword appears in none of the thirds of the text."
        checks.append(_finding(
            'content-keyword-distribution', "Keyword distribution", status, message, IMPORTANT,
            tip="Use the keyword at the start, in the middle and near the end.",
        ))

    if word_count > LISTS_EXPECTED_ABOVE_WORDS:
        has_lists = bool(ctx.lists)
        checks.append(_finding(
            'content-has-lists', "Lists", PASS if has_lists else WARNING,
            f"{len(ctx.lists)} list(s) structure the content." if has_lists
            else "Long content without any bulleted or numbered list.",
            BONUS, tip="Lists make long content easier to scan.",
        ))

    return checks
