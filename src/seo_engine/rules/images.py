"""Image checks: alt coverage, keyword in alt, presence."""

from functools import partial
from typing import List

from seo_engine.lexical import significant_words
from seo_engine.models import AnalysisContext, Finding, PageType, RuleGroup
from seo_engine.rules.base import BONUS, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.IMAGES)

_LOW_MEDIA_PAGES = (PageType.LEGAL, PageType.CONTACT, PageType.FORM)


def _alt_message(total: int, with_alt: int) -> str:
    missing = total - with_alt
    if not missing:
        return f"All {total} image(s) have alt text."
    return f"{missing} of {total} image(s) have no alt text."


def check_images(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    total = ctx.images_total
    with_alt = ctx.images_with_alt

    if ctx.page_type in _LOW_MEDIA_PAGES:
        if total:
            checks.append(_finding(
                'images-alt', "Image alt text", pass_or(with_alt == total),
                _alt_message(total, with_alt), IMPORTANT,
                tip="Describe every image for screen readers.",
            ))
        checks.append(_finding(
            'images-present', "Images", PASS,
            "Images are optional on this type of page.", BONUS,
        ))
        return checks

    if total:
        ratio = with_alt / total
        if ratio >= ctx.thresholds.alt_coverage_ratio:
            status = pass_or(ratio == 1)
        else:
            status = FAIL
        checks.append(_finding(
            'images-alt', "Image alt text", status, _alt_message(total, with_alt), IMPORTANT,
            tip="Describe every image for screen readers.",
        ))

    keyword = ctx.normalized_keyword
    alts = [image.alt for image in ctx.images if image.alt]
    if keyword and alts:
        keyword_words = significant_words(keyword)
        min_length = ctx.thresholds.alt_descriptive_min_length

        def relevant(alt: str) -> bool:
            normalized = normalize_for_comparison(alt)
            if keyword in normalized:
                return True
            if any(word in normalized for word in keyword_words):
                return True
            return len(normalized) >= min_length

        found = any(relevant(alt) for alt in alts)
        checks.append(_finding(
            'images-alt-keyword', "Keyword in alt text", pass_or(found),
            "At least one alt text is descriptive or mentions the keyword." if found
            else "No alt text mentions the keyword.",
            BONUS, tip="Describe one image with the focus keyword where it fits.",
        ))

    checks.append(_finding(
        'images-present', "Images", pass_or(total > 0),
        f"The page has {total} image(s)." if total else "The page has no image.",
        IMPORTANT, tip="Illustrate the content with at least one relevant image.",
    ))

    if ctx.input.is_post:
        if total >= 1:
            checks.append(_finding(
                'images-quantity', "Images in article", PASS,
                f"The article has {total} image(s).", BONUS,
            ))
        else:
            checks.append(_finding(
                'images-quantity', "Images in article", FAIL,
                "The article has no image.", IMPORTANT,
                tip="Articles with images get more engagement and shares.",
            ))

    return checks
