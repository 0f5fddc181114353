"""Accessibility checks on anchors, alt texts and headings."""

import re
from functools import partial
from typing import List

from seo_engine.constants import (
    ALL_CAPS_MIN_LENGTH,
    CAMERA_FILENAME_PATTERN,
    FILE_EXTENSION_PATTERN,
    GENERIC_ALT_PATTERN,
    LINK_DENSITY_FAIL,
    LINK_DENSITY_WARN,
    SHORT_ANCHOR_MIN_CHARS,
)
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding, percent
from seo_engine.text_extraction import normalize_for_comparison

_finding = partial(finding, RuleGroup.ACCESSIBILITY)

_DIGITS_ONLY = re.compile(r'^\d+$')
_UPPERCASE_LETTER = re.compile(r'[A-Z]')


def _is_generic_alt(alt: str) -> bool:
    alt = alt.strip()
    return bool(
        GENERIC_ALT_PATTERN.search(alt)
        or FILE_EXTENSION_PATTERN.search(alt)
        or _DIGITS_ONLY.search(alt)
    )


def _is_camera_filename(alt: str) -> bool:
    alt = alt.strip()
    return bool(CAMERA_FILENAME_PATTERN.search(alt) or FILE_EXTENSION_PATTERN.search(alt))


def _is_all_caps(text: str) -> bool:
    text = text.strip()
    return len(text) >= ALL_CAPS_MIN_LENGTH and text == text.upper() and bool(_UPPERCASE_LETTER.search(text))


def _link_density_finding(ctx: AnalysisContext) -> Finding:
    text_length = len(ctx.full_text)
    if not text_length:
        return _finding(
            'a11y-link-density', "Link density", PASS, "No text to measure link density on.", IMPORTANT,
        )
    ratio = sum(len(link.text.strip()) for link in ctx.links) / text_length
    if ratio > LINK_DENSITY_FAIL:
        status, message = FAIL, f"{percent(ratio)}% of the text is link text: the page reads like a link list."
    elif ratio > LINK_DENSITY_WARN:
        status, message = WARNING, f"{percent(ratio)}% of the text is link text."
    else:
        status, message = PASS, f"{percent(ratio)}% of the text is link text."
    return _finding(
        'a11y-link-density', "Link density", status, message, IMPORTANT,
        tip="Surround links with explanatory text.",
    )


def check_accessibility(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    alts = [image.alt for image in ctx.images if image.alt]

    short = [
        link for link in ctx.links
        if link.text.strip() and len(link.text.strip()) < SHORT_ANCHOR_MIN_CHARS
    ]
    checks.append(_finding(
        'a11y-short-anchors', "Anchor length", FAIL if short else PASS,
        f'{len(short)} link(s) have a very short anchor such as "{short[0].text.strip()}".' if short
        else "Link anchors are long enough to be understood.",
        IMPORTANT, tip="Screen reader users navigate by link text; make it meaningful.",
    ))

    generic = [alt for alt in alts if _is_generic_alt(alt)]
    checks.append(_finding(
        'a11y-alt-quality', "Alt text quality", WARNING if generic else PASS,
        f'{len(generic)} alt text(s) are generic, such as "{generic[0]}".' if generic
        else "Alt texts are descriptive.",
        IMPORTANT, tip="Describe what the image shows.",
    ))

    empty = [h for h in ctx.headings if h.level != 1 and not h.text.strip()]
    checks.append(_finding(
        'a11y-empty-headings', "Empty headings", FAIL if empty else PASS,
        f"{len(empty)} empty heading(s): {', '.join(f'h{h.level}' for h in empty)}." if empty
        else "No empty heading.",
        CRITICAL, tip="Remove empty headings or give them text.",
    ))

    adjacent = sum(
        1 for previous, current in zip(ctx.links, ctx.links[1:]) if previous.url == current.url
    )
    checks.append(_finding(
        'a11y-duplicate-links', "Duplicate adjacent links", WARNING if adjacent else PASS,
        f"{adjacent} link(s) repeat the previous link's destination." if adjacent
        else "No adjacent duplicate links.",
        BONUS, tip="Merge adjacent links to the same page.",
    ))

    caps = [h for h in ctx.headings if _is_all_caps(h.text)]
    checks.append(_finding(
        'a11y-all-caps', "Uppercase headings", WARNING if caps else PASS,
        f'{len(caps)} heading(s) are in capitals, such as "{caps[0].text.strip()}".' if caps
        else "No heading is written in capitals.",
        BONUS, tip="Use CSS text-transform instead; screen readers may spell capitals out.",
    ))

    checks.append(_link_density_finding(ctx))

    camera = [alt for alt in alts if _is_camera_filename(alt)]
    checks.append(_finding(
        'a11y-image-filename', "File names as alt", WARNING if camera else PASS,
        f'{len(camera)} alt text(s) look like file names, such as "{camera[0]}".' if camera
        else "No alt text looks like a file name.",
        IMPORTANT, tip="Replace file names with a description.",
    ))

    heading_texts = {normalize_for_comparison(h.text) for h in ctx.headings}
    redundant = [
        alt for alt in alts
        if normalize_for_comparison(alt) and normalize_for_comparison(alt) in heading_texts
    ]
    checks.append(_finding(
        'a11y-alt-duplicates-context', "Alt repeats heading", WARNING if redundant else PASS,
        f'{len(redundant)} alt text(s) repeat a heading, such as "{redundant[0]}".' if redundant
        else "Alt texts add information beyond the headings.",
        BONUS, tip="Describe the image itself rather than repeating the heading.",
    ))

    return checks
