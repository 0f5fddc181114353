"""Readability checks adapted to the analysis locale.

French text is scored with Kandel-Moles, English with the original
Flesch reading ease. The checks are skipped entirely on pages too short
for the ratios to mean anything.
"""

from functools import partial
from typing import List

from seo_engine.constants import MIN_WORDS_FOR_READABILITY
from seo_engine.lexical import (
    count_long_sections,
    count_words,
    flesch_reading_ease,
    long_sentence_ratio,
    max_consecutive_same_start,
    passive_sentence_ratio,
    transition_word_ratio,
)
from seo_engine.locales import get_lexicon
from seo_engine.models import AnalysisContext, Finding, RuleGroup
from seo_engine.rules.base import BONUS, FAIL, IMPORTANT, PASS, WARNING, finding, percent
from seo_engine.text_extraction import extract_plain_text, top_level_nodes

_finding = partial(finding, RuleGroup.READABILITY)

# Long-sections pass is only reported on pages with this many words
_LONG_SECTIONS_REPORT_WORDS = 300


def _has_long_paragraph(sources: list, limit: int) -> bool:
    for source in sources:
        for node in top_level_nodes(source):
            if node.get('type') == 'paragraph' and count_words(extract_plain_text(node)) > limit:
                return True
    return False


def check_readability(ctx: AnalysisContext) -> List[Finding]:
    if ctx.word_count < MIN_WORDS_FOR_READABILITY:
        return []

    checks = []
    lexicon = get_lexicon(ctx.locale)
    thresholds = ctx.thresholds
    sentences = ctx.sentences

    score = flesch_reading_ease(ctx.full_text, ctx.locale)
    if score >= lexicon.flesch.pass_score:
        status, message = PASS, f"Reading ease is {score}/100: the text is easy to read."
    elif score >= lexicon.flesch.warn_score:
        status, message = WARNING, f"Reading ease is {score}/100: the text is fairly hard to read."
    else:
        status, message = FAIL, f"Reading ease is {score}/100: the text is hard to read."
    checks.append(_finding(
        'readability-flesch', "Reading ease", status, message, IMPORTANT,
        tip="Shorten sentences and prefer simple words.",
    ))

    if sentences:
        ratio = long_sentence_ratio(sentences, ctx.locale)
        too_many = ratio > thresholds.long_sentence_ratio
        checks.append(_finding(
            'readability-long-sentences', "Sentence length", WARNING if too_many else PASS,
            f"{percent(ratio)}% of sentences exceed {lexicon.long_sentence_words} words.",
            IMPORTANT, tip="Split long sentences in two.",
        ))

    sources = ctx.rich_text_sources
    long_paragraph = _has_long_paragraph(sources, thresholds.long_paragraph_words)
    checks.append(_finding(
        'readability-long-paragraphs', "Paragraph length", WARNING if long_paragraph else PASS,
        f"At least one paragraph exceeds {thresholds.long_paragraph_words} words." if long_paragraph
        else "Paragraphs have a comfortable length.",
        IMPORTANT, tip="Break long paragraphs into shorter ones.",
    ))

    if sentences:
        ratio = passive_sentence_ratio(sentences, ctx.locale)
        too_many = ratio > lexicon.passive_max_ratio
        checks.append(_finding(
            'readability-passive', "Passive voice", WARNING if too_many else PASS,
            f"{percent(ratio)}% of sentences use the passive voice.",
            IMPORTANT, tip="Rewrite passive sentences in the active voice.",
        ))

        ratio = transition_word_ratio(sentences, ctx.locale)
        too_few = ratio < lexicon.transitions_min_ratio
        checks.append(_finding(
            'readability-transitions', "Transition words", WARNING if too_few else PASS,
            f"{percent(ratio)}% of sentences contain a transition word.",
            BONUS, tip="Link ideas with words such as \"however\" or \"therefore\".",
        ))

    if len(sentences) >= 3:
        streak = max_consecutive_same_start(sentences)
        repetitive = streak >= thresholds.consecutive_starts_max
        checks.append(_finding(
            'readability-consecutive-starts', "Sentence openings", WARNING if repetitive else PASS,
            f"{streak} consecutive sentences start with the same word." if repetitive
            else "Sentence openings are varied.",
            BONUS, tip="Vary the first word of consecutive sentences.",
        ))

    long_sections = sum(count_long_sections(source, thresholds.long_section_words) for source in sources)
    if long_sections:
        checks.append(_finding(
            'readability-long-sections', "Section length", WARNING,
            f"{long_sections} section(s) run over {thresholds.long_section_words} words "
            f"without a subheading.",
            IMPORTANT, tip="Add subheadings to break up long sections.",
        ))
    elif ctx.word_count > _LONG_SECTIONS_REPORT_WORDS:
        checks.append(_finding(
            'readability-long-sections', "Section length", PASS,
            "Sections are broken up by subheadings.", IMPORTANT,
        ))

    return checks
