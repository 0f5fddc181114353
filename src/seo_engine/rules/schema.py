"""Structured data readiness."""

from typing import List

from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, finding, pass_or


def check_schema(ctx: AnalysisContext) -> List[Finding]:
    missing = []
    if not ctx.input.meta_title:
        missing.append("title")
    if not ctx.input.meta_description:
        missing.append("description")
    if not ctx.images_total:
        missing.append("image")

    return [finding(
        RuleGroup.SCHEMA, 'schema-readiness', "Structured data readiness", pass_or(not missing),
        "Title, description and image are available for structured data." if not missing
        else f"Missing for structured data: {', '.join(missing)}.",
        BONUS,
    )]
