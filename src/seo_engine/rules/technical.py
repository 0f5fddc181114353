"""Canonical URL and robots meta checks.

Both checks are skipped when the CMS does not expose the field at all
(``None``); an empty string means the field exists but was left blank.
"""

from functools import partial
from typing import List

from seo_engine.models import AnalysisContext, Finding, PageType, RuleGroup
from seo_engine.rules.base import CRITICAL, FAIL, IMPORTANT, PASS, WARNING, finding

_finding = partial(finding, RuleGroup.TECHNICAL)

_NOINDEX_ACCEPTABLE = (PageType.LEGAL, PageType.FORM, PageType.CONTACT)


def _canonical_finding(ctx: AnalysisContext, canonical: str) -> Finding:
    if not canonical:
        return _finding(
            'canonical-missing', "Canonical URL", WARNING,
            "The canonical URL field is empty.", IMPORTANT,
            tip="Set the canonical URL to the preferred address of this page.",
        )
    if not canonical.startswith(('http://', 'https://')):
        return _finding(
            'canonical-invalid', "Canonical URL", WARNING,
            f'The canonical URL "{canonical}" is not absolute.', IMPORTANT,
            tip="Use a full URL starting with https://.",
        )
    if ctx.site_url and not canonical.startswith(ctx.site_url):
        return _finding(
            'canonical-external', "Canonical URL", WARNING,
            "The canonical URL points to another site.", IMPORTANT,
            tip="Only point the canonical elsewhere for syndicated content.",
        )
    return _finding('canonical-ok', "Canonical URL", PASS, "The canonical URL is valid.", IMPORTANT)


def check_technical(ctx: AnalysisContext) -> List[Finding]:
    checks = []

    if ctx.input.canonical_url is not None:
        checks.append(_canonical_finding(ctx, ctx.input.canonical_url.strip()))

    if ctx.input.robots_meta is not None:
        robots = ctx.input.robots_meta.lower().strip()
        noindex = 'noindex' in robots
        nofollow = 'nofollow' in robots

        if noindex:
            acceptable = ctx.page_type in _NOINDEX_ACCEPTABLE
            checks.append(_finding(
                'robots-noindex', "Robots indexing", WARNING if acceptable else FAIL,
                f"noindex is set; acceptable on a {ctx.page_type.value} page." if acceptable
                else "noindex is set: this page will not appear in search results.",
                CRITICAL, tip="Remove noindex unless the page must stay out of search engines.",
            ))
        if nofollow:
            checks.append(_finding(
                'robots-nofollow', "Robots link following", WARNING,
                "nofollow is set: links on this page pass no authority.", IMPORTANT,
                tip="Remove nofollow so internal links are followed.",
            ))
        if not noindex and not nofollow:
            checks.append(_finding(
                'robots-ok', "Robots meta", PASS, "The page can be indexed and followed.", IMPORTANT,
            ))

    return checks
