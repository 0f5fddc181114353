"""Title tag checks."""

import re
from functools import partial
from typing import List

from seo_engine.constants import TITLE_SEPARATOR_PATTERN
from seo_engine.lexical import keyword_matches_text, significant_words
from seo_engine.locales import get_lexicon
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.TITLE)


def _keyword_position(keyword: str, title: str) -> int:
    position = title.find(keyword)
    if position != -1:
        return position
    positions = [title.find(word) for word in significant_words(keyword)]
    positions = [p for p in positions if p != -1]
    return min(positions) if positions else len(title)


def check_title(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds
    lexicon = get_lexicon(ctx.locale)
    title = ctx.input.meta_title or ""

    if not title.strip():
        return [_finding(
            'title-missing', "Meta title", FAIL,
            "No meta title is set.", CRITICAL,
            tip="Write a unique title of 30 to 60 characters containing the focus keyword.",
        )]

    length = len(title)
    if length < thresholds.title_min:
        checks.append(_finding(
            'title-length', "Title length", WARNING,
            f"Title is too short ({length} characters, minimum {thresholds.title_min}).",
            CRITICAL, tip="Add a qualifier or a benefit to use the available space.",
        ))
    elif length > thresholds.title_max:
        checks.append(_finding(
            'title-length', "Title length", WARNING,
            f"Title is too long ({length} characters, maximum {thresholds.title_max}); "
            f"search engines will truncate it.",
            CRITICAL, tip="Move the brand to the end or drop filler words.",
        ))
    else:
        checks.append(_finding(
            'title-length', "Title length", PASS,
            f"Title length is good ({length} characters).", CRITICAL,
        ))

    normalized_title = normalize_for_comparison(title)
    keyword = ctx.normalized_keyword

    if keyword:
        display = ctx.input.focus_keyword or keyword
        present = keyword_matches_text(keyword, normalized_title)
        checks.append(_finding(
            'title-keyword', "Keyword in title", pass_or(present, FAIL),
            f'The title contains the focus keyword "{display}".' if present
            else f'The title does not contain the focus keyword "{display}".',
            CRITICAL,
        ))

        if present:
            leading = _keyword_position(keyword, normalized_title) < length // 2
            checks.append(_finding(
                'title-keyword-position', "Keyword position in title", pass_or(leading),
                "The keyword appears in the first half of the title." if leading
                else "The keyword appears late in the title.",
                IMPORTANT, tip="Move the focus keyword towards the start of the title.",
            ))

    parts = [p.strip().lower() for p in TITLE_SEPARATOR_PATTERN.split(title) if p.strip()]
    duplicated = len(parts) > 1 and len(set(parts)) < len(parts)
    if not duplicated and ctx.site_name:
        brand = ctx.site_name.strip().lower()
        duplicated = bool(brand) and title.lower().count(brand) > 1
    checks.append(_finding(
        'title-duplicate-brand', "Repeated brand", pass_or(not duplicated),
        "A segment of the title is repeated." if duplicated
        else "No repeated segment in the title.",
        IMPORTANT, tip="Keep the brand name only once, at the end of the title.",
    ))

    power_words = [w for w in lexicon.power_words if w in normalized_title]
    checks.append(_finding(
        'title-power-words', "Power words", pass_or(bool(power_words)),
        f"Power words found: {', '.join(power_words[:3])}." if power_words
        else "No power word in the title.",
        BONUS, tip="Words such as guide, complete or essential raise the click-through rate.",
    ))

    has_number = bool(re.search(r'\d', title))
    checks.append(_finding(
        'title-has-number', "Number in title", pass_or(has_number),
        "The title contains a number." if has_number else "The title contains no number.",
        BONUS, tip="Numbered titles (\"7 tips...\") tend to attract more clicks.",
    ))

    lowered = title.lower().strip()
    is_question = title.strip().endswith('?') or any(
        lowered.startswith(word + ' ') or lowered.startswith(word + '-')
        for word in lexicon.interrogatives
    )
    checks.append(_finding(
        'title-is-question', "Question title", pass_or(is_question),
        "The title is phrased as a question." if is_question
        else "The title is not phrased as a question.",
        BONUS, tip="Questions match conversational and voice searches.",
    ))

    sentiment = [w for w in lexicon.sentiment_words if w in normalized_title]
    checks.append(_finding(
        'title-sentiment', "Emotional words", pass_or(bool(sentiment)),
        f"Emotional words found: {', '.join(sentiment[:3])}." if sentiment
        else "The title carries no emotional word.",
        BONUS, tip="A touch of emotion (secret, mistake, essential) makes a title stand out.",
    ))

    return checks
