"""URL slug checks."""

import re
from functools import partial
from typing import List

from seo_engine.lexical import is_stop_word_in_compound
from seo_engine.locales import get_lexicon
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import slugify_keyword

_finding = partial(finding, RuleGroup.URL)

_INVALID_SLUG_CHARS = re.compile(r'[A-Z]|[^a-z0-9\-/]')


def is_utility_slug(slug: str, locale: str) -> bool:
    return any(
        slug == utility or slug.endswith(f"/{utility}")
        for utility in get_lexicon(locale).utility_slugs
    )


def check_url(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    slug = ctx.input.slug or ""
    max_length = ctx.thresholds.slug_max_length

    if not slug:
        return [_finding(
            'slug-missing', "URL slug", FAIL, "The page has no slug.", IMPORTANT,
            tip="Give the page a short, descriptive slug.",
        )]

    too_long = len(slug) > max_length
    checks.append(_finding(
        'slug-length', "Slug length", pass_or(not too_long, FAIL),
        f"The slug is too long ({len(slug)} characters, maximum {max_length})." if too_long
        else f"Slug length is good ({len(slug)} characters).",
        IMPORTANT, tip="Keep only the meaningful words of the slug.",
    ))

    bad_format = bool(_INVALID_SLUG_CHARS.search(slug))
    checks.append(_finding(
        'slug-format', "Slug format", pass_or(not bad_format),
        "The slug contains uppercase letters or special characters." if bad_format
        else "Slug format is correct (lowercase letters, digits and hyphens).",
        IMPORTANT, tip="Use only lowercase letters, digits and hyphens.",
    ))

    keyword = ctx.normalized_keyword
    if keyword and is_utility_slug(slug, ctx.locale):
        checks.append(_finding(
            'slug-keyword', "Keyword in slug", PASS,
            "Utility page: the keyword is not required in the slug.", BONUS,
        ))
    elif keyword:
        slugified = slugify_keyword(ctx.input.focus_keyword or keyword)
        lowered = slug.lower()
        parts = [p for p in slugified.split('-') if len(p) > 3]
        present = slugified in lowered or (bool(parts) and all(p in lowered for p in parts))
        checks.append(_finding(
            'slug-keyword', "Keyword in slug", pass_or(present),
            f'The slug contains the keyword ("{slugified}").' if present
            else f'The slug does not contain the keyword ("{slugified}").',
            IMPORTANT, tip="Put the focus keyword in the slug.",
        ))

    stop_words = get_lexicon(ctx.locale).stop_words
    parts = slug.split('-')
    found = [
        part for index, part in enumerate(parts)
        if part in stop_words and not is_stop_word_in_compound(parts, index, ctx.locale)
    ]
    checks.append(_finding(
        'slug-stopwords', "Stop words in slug", pass_or(not found),
        f"The slug contains stop words: {', '.join(found)}." if found
        else "No unnecessary stop words in the slug.",
        BONUS, tip="Remove articles and prepositions from the slug.",
    ))

    return checks
