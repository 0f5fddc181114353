"""Product page checks, run only for documents flagged as products."""

from functools import partial
from typing import List

from seo_engine.constants import (
    AVAILABILITY_PATTERN,
    PRICE_PATTERN,
    PRODUCT_DESCRIPTION_MIN_WORDS,
    PRODUCT_DESCRIPTION_WARN_WORDS,
    PRODUCT_MIN_IMAGES,
    REVIEW_PATTERN,
)
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding, pass_or
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.ECOMMERCE)


def check_ecommerce(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    text = ctx.full_text

    has_price = bool(PRICE_PATTERN.search(text))
    checks.append(_finding(
        'product-price-mentioned', "Price in content", pass_or(has_price),
        "The content mentions a price." if has_price else "No price found in the content.",
        IMPORTANT, tip='Mention the price or a "starting at" amount.',
    ))

    words = ctx.word_count
    if words >= PRODUCT_DESCRIPTION_MIN_WORDS:
        status = PASS
    elif words >= PRODUCT_DESCRIPTION_WARN_WORDS:
        status = WARNING
    else:
        status = FAIL
    checks.append(_finding(
        'product-short-description', "Product description", status,
        f"The product description has {words} words (recommended: {PRODUCT_DESCRIPTION_MIN_WORDS}).",
        IMPORTANT, tip="Describe features, benefits, use cases and specifications.",
    ))

    images = ctx.images_total
    if images >= PRODUCT_MIN_IMAGES:
        status, message = PASS, f"{images} product image(s)."
    elif images >= 1:
        status, message = WARNING, f"Only one product image (recommended: {PRODUCT_MIN_IMAGES}+)."
    else:
        status, message = FAIL, "No product image: products without photos rarely sell."
    checks.append(_finding(
        'product-has-images', "Product images", status, message, CRITICAL,
        tip="Add photos from several angles and close-ups of details.",
    ))

    title = (ctx.input.meta_title or "").lower()
    name = ctx.normalized_keyword or normalize_for_comparison(ctx.site_name)
    in_title = bool(name) and (name in title or name in normalize_for_comparison(title))
    checks.append(_finding(
        'product-title-includes-brand', "Product name in title", pass_or(in_title),
        "The title names the product or brand." if in_title
        else "The title does not name the product or brand." if name
        else "No focus keyword set: use the product name as focus keyword.",
        BONUS, tip="Put the product or brand name at the start of the meta title.",
    ))

    price_in_meta = bool(PRICE_PATTERN.search((ctx.input.meta_description or "").lower()))
    checks.append(_finding(
        'product-meta-includes-price', "Price in meta description", pass_or(price_in_meta),
        "The meta description mentions the price." if price_in_meta
        else "The meta description does not mention the price.",
        BONUS, tip='Add the price or "starting at" amount to the meta description.',
    ))

    has_reviews = bool(REVIEW_PATTERN.search(text))
    checks.append(_finding(
        'product-review-readiness', "Reviews", pass_or(has_reviews),
        "The content refers to reviews or ratings." if has_reviews
        else "No reviews or ratings are mentioned.",
        BONUS, tip="Add a customer reviews section or Review structured data.",
    ))

    available = bool(AVAILABILITY_PATTERN.search(text))
    checks.append(_finding(
        'product-availability', "Availability", pass_or(available),
        "Availability information is present." if available
        else "No availability information found.",
        IMPORTANT, tip="State whether the product is in stock or made to order.",
    ))

    return checks
