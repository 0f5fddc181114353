"""Internal and external linking checks."""

from functools import partial
from typing import List

from seo_engine.locales import LEXICONS
from seo_engine.models import AnalysisContext, Finding, PageType, RuleGroup
from seo_engine.rules.base import BONUS, IMPORTANT, PASS, WARNING, finding, is_internal_link, pass_or

_finding = partial(finding, RuleGroup.LINKING)

# Anchor vocabulary of every locale; editors often mix languages
_GENERIC_ANCHORS = frozenset(a for lexicon in LEXICONS.values() for a in lexicon.generic_anchors)


def check_linking(ctx: AnalysisContext) -> List[Finding]:
    checks = []
    links = ctx.links
    internal = [link for link in links if is_internal_link(link.url)]
    external = [link for link in links if link.url.startswith('http')]

    checks.append(_finding(
        'linking-internal', "Internal links", pass_or(bool(internal)),
        f"{len(internal)} internal link(s)." if internal else "The page has no internal link.",
        IMPORTANT, tip="Link to related pages of the site to spread authority.",
    ))

    if ctx.page_type in (PageType.CONTACT, PageType.LEGAL, PageType.FORM):
        checks.append(_finding(
            'linking-external', "External links", PASS,
            "External links are optional on this type of page.", BONUS,
        ))
    else:
        checks.append(_finding(
            'linking-external', "External links", pass_or(bool(external)),
            f"{len(external)} external link(s)." if external else "The page has no external link.",
            BONUS, tip="Cite one or two authoritative sources.",
        ))

    generic = [link for link in links if link.text.lower().strip() in _GENERIC_ANCHORS]
    if generic:
        checks.append(_finding(
            'linking-generic-anchors', "Descriptive anchors", WARNING,
            f'{len(generic)} link(s) use a generic anchor such as "{generic[0].text.strip()}".',
            IMPORTANT, tip="Describe the destination in the anchor text.",
        ))
    elif links:
        checks.append(_finding(
            'linking-generic-anchors', "Descriptive anchors", PASS,
            "All links use descriptive anchor text.", IMPORTANT,
        ))

    empty = [link for link in links if link.url.strip() in ('', '#')]
    if empty:
        checks.append(_finding(
            'linking-empty', "Empty links", WARNING,
            f"{len(empty)} link(s) point nowhere.", IMPORTANT,
            tip="Give each link a real destination or remove it.",
        ))
    elif links:
        checks.append(_finding(
            'linking-empty', "Empty links", PASS, "Every link has a destination.", IMPORTANT,
        ))

    return checks
