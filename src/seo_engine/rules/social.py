"""Open Graph / social preview checks."""

from functools import partial
from typing import List

from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, IMPORTANT, finding, pass_or

_finding = partial(finding, RuleGroup.SOCIAL)


def check_social(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    thresholds = ctx.thresholds

    meta_image = ctx.input.meta_image
    has_image = isinstance(meta_image, dict) or (
        isinstance(meta_image, (int, str)) and not isinstance(meta_image, bool) and bool(meta_image)
    )
    checks.append(_finding(
        'social-og-image', "Social image", pass_or(has_image),
        "A social sharing image is set." if has_image
        else "No social sharing image: networks will pick one at random.",
        IMPORTANT, tip="Set a 1200x630 meta image.",
    ))

    title = ctx.input.meta_title or ""
    if title:
        fits = len(title) <= thresholds.social_title_max
        checks.append(_finding(
            'social-title-truncation', "Social title", pass_or(fits),
            "The title fits social previews." if fits
            else f"The title exceeds {thresholds.social_title_max} characters and will be cut in previews.",
            BONUS,
        ))

    description = ctx.input.meta_description or ""
    if description:
        fits = len(description) <= thresholds.social_description_max
        checks.append(_finding(
            'social-desc-length', "Social description", pass_or(fits),
            "The description fits social previews." if fits
            else f"The description exceeds {thresholds.social_description_max} characters "
                 f"and will be cut in previews.",
            BONUS,
        ))

    return checks
