# src/seo_engine/lexical.py
"""Tokenizer and lexical statistics.

All functions are pure. The locale is always an explicit argument; word
lists and formula constants come from seo_engine.locales.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from seo_engine.constants import (
    HOME_SLUGS,
    MIN_TOKEN_LENGTH,
    PLACEHOLDER_PATTERNS,
    REPEATED_BLOCK_MIN_LENGTH,
    REPEATED_BLOCK_MIN_WORDS,
    SIGNIFICANT_WORD_MIN_LENGTH,
)
from seo_engine.locales import all_legal_slugs, get_lexicon
from seo_engine.models import Heading, PageType
from seo_engine.text_extraction import extract_plain_text, normalize_for_comparison, top_level_nodes

_WHITESPACE = re.compile(r'\s+')
_NON_ALNUM = re.compile(r'[^a-z0-9]+')
_SENTENCE_BREAK = re.compile(r'(?<=[.!?])\s+')
_PARAGRAPH_BREAK = re.compile(r'\n\s*\n|\n')

_FR_VOWELS = 'aeiouyàâäéèêëïîôùûüÿæœ'
_FR_LETTERS = re.compile(r'[^a-zàâäéèêëïîôùûüÿæœ]')
_FR_VOWEL_GROUPS = re.compile(f'[{_FR_VOWELS}]+')
_FR_SILENT_E = re.compile(f'[^{_FR_VOWELS}]e$')
_FR_TRIPHTHONGS = re.compile(r'eau|oeu|aie|oui')

_EN_SPECIAL_SYLLABLES = {
    'the': 1, 'are': 1, 'were': 1, 'here': 1, 'there': 1,
    'where': 1, 'gone': 1, 'done': 1, 'once': 1, 'give': 1,
    'have': 1, 'come': 1, 'some': 1, 'love': 1, 'move': 1,
    'live': 1, 'like': 1, 'make': 1, 'take': 1, 'use': 1,
    'more': 1, 'fire': 2, 'hire': 2, 'tire': 2, 'wire': 2,
    'every': 3, 'different': 3, 'business': 3, 'beautiful': 3,
    'interesting': 4, 'comfortable': 4, 'experience': 4,
    'area': 3, 'idea': 3, 'real': 1, 'being': 2,
    'create': 2, 'created': 3, 'people': 2,
}

_LOCAL_SEO_PREFIX_FR = re.compile(
    r'^(agence-web|creation-site-internet|agence-digitale|agence-communication|creation-logo'
    r'|webmaster|developpeur-web|referencement-seo|zone-intervention)-'
)
_LOCAL_SEO_PREFIX_EN = re.compile(
    r'^(web-agency|web-design|web-developer|seo-agency|digital-agency|logo-design|webmaster)-'
)


def js_round(value: float) -> int:
    """Round half up, the way score formulas expect (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


# =============================================================================
# Words and sentences
# =============================================================================

def count_words(text: Optional[str]) -> int:
    if not text:
        return 0
    return len(text.split())


def split_sentences(text: Optional[str], locale: str = 'fr') -> list[str]:
    """Split text on ``.!?`` followed by whitespace.

    Abbreviations of the locale ("M.", "Dr.", "e.g.") do not end a sentence.
    """
    if not text or not text.strip():
        return []

    lexicon = get_lexicon(locale)
    protected = text
    placeholders = {}
    for index, abbreviation in enumerate(lexicon.abbreviations):
        marker = f"\x00{index}\x00"
        pattern = re.compile(r'\b' + re.escape(abbreviation) + r'\.(?=\s)')
        if pattern.search(protected):
            protected = pattern.sub(marker, protected)
            placeholders[marker] = abbreviation + '.'
    if lexicon.code == 'fr':
        protected = protected.replace('n°', '\x00n\x00')
        placeholders['\x00n\x00'] = 'n°'

    sentences = []
    for raw in _SENTENCE_BREAK.split(protected):
        for marker, original in placeholders.items():
            raw = raw.replace(marker, original)
        raw = raw.strip()
        if raw:
            sentences.append(raw)
    return sentences


def count_sentences(text: Optional[str], locale: str = 'fr') -> int:
    return len(split_sentences(text, locale))


def split_paragraphs(text: Optional[str]) -> list[str]:
    if not text:
        return []
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def count_syllables(word: str, locale: str = 'fr') -> int:
    """Approximate syllable count of one word; never less than 1."""
    if get_lexicon(locale).code == 'en':
        return _count_syllables_en(word)
    return _count_syllables_fr(word)


def _count_syllables_fr(word: str) -> int:
    lower = _FR_LETTERS.sub('', word.lower())
    if not lower:
        return 1

    groups = _FR_VOWEL_GROUPS.findall(lower)
    if not groups:
        return 1

    count = len(groups)
    if _FR_SILENT_E.search(lower) and count > 1:
        count -= 1
    count -= len(_FR_TRIPHTHONGS.findall(lower))
    return max(1, count)


def _count_syllables_en(word: str) -> int:
    lower = re.sub(r'[^a-z]', '', word.lower())
    if len(lower) <= 2:
        return 1
    if lower in _EN_SPECIAL_SYLLABLES:
        return _EN_SPECIAL_SYLLABLES[lower]

    count = 0
    previous_vowel = False
    for char in lower:
        is_vowel = char in 'aeiouy'
        if is_vowel and not previous_vowel:
            count += 1
        previous_vowel = is_vowel

    # Silent final e, except -le ("table")
    if lower.endswith('e') and not lower.endswith('le') and count > 1:
        count -= 1

    # -ed is silent unless it follows t or d
    if lower.endswith('ed') and len(lower) > 3 and lower[-3] not in 'td' and count > 1:
        count -= 1

    return max(1, count)


def flesch_reading_ease(text: Optional[str], locale: str = 'fr') -> int:
    """Flesch-family reading ease, clamped to 0..100.

    French uses Kandel-Moles (207 - 1.015 ASL - 73.6 ASW), English the
    original Flesch formula (206.835 - 1.015 ASL - 84.6 ASW).
    """
    lexicon = get_lexicon(locale)
    sentences = split_sentences(text, lexicon.code)
    words = (text or "").split()
    if not sentences or not words:
        return 0

    syllables = sum(count_syllables(word, lexicon.code) for word in words)
    words_per_sentence = len(words) / len(sentences)
    syllables_per_word = syllables / len(words)

    flesch = lexicon.flesch
    score = (
        flesch.base
        - flesch.sentence_weight * words_per_sentence
        - flesch.syllable_weight * syllables_per_word
    )
    return max(0, min(100, js_round(score)))


def is_passive(sentence: str, locale: str = 'fr') -> bool:
    lexicon = get_lexicon(locale)
    match = lexicon.passive_pattern.search(sentence)
    if not match:
        return False
    if lexicon.passive_exclusions is not None:
        participle = match.group(match.lastindex or 0)
        if lexicon.passive_exclusions.search(participle):
            return False
    return True


def has_transition_word(sentence: str, locale: str = 'fr') -> bool:
    lower = sentence.lower().strip()
    return any(
        lower.startswith(word) or f", {word}" in lower or f" {word} " in lower
        for word in get_lexicon(locale).transition_words
    )


def passive_sentence_ratio(sentences: Sequence[str], locale: str = 'fr') -> float:
    if not sentences:
        return 0.0
    return sum(1 for s in sentences if is_passive(s, locale)) / len(sentences)


def transition_word_ratio(sentences: Sequence[str], locale: str = 'fr') -> float:
    if not sentences:
        return 0.0
    return sum(1 for s in sentences if has_transition_word(s, locale)) / len(sentences)


def long_sentence_ratio(sentences: Sequence[str], locale: str = 'fr') -> float:
    if not sentences:
        return 0.0
    limit = get_lexicon(locale).long_sentence_words
    return sum(1 for s in sentences if count_words(s) > limit) / len(sentences)


def max_consecutive_same_start(sentences: Sequence[str]) -> int:
    """Longest run of consecutive sentences starting with the same word."""
    longest = 1 if sentences else 0
    streak = 1
    previous = ""
    for sentence in sentences:
        parts = sentence.strip().split()
        first = parts[0].lower() if parts else ""
        if first and first == previous:
            streak += 1
            longest = max(longest, streak)
        else:
            streak = 1
        previous = first
    return longest


# =============================================================================
# Keyword matching
# =============================================================================

@dataclass(frozen=True)
class KeywordOccurrences:
    exact_count: int
    word_level_match: bool
    effective_density: float


def significant_words(normalized_keyword: str) -> list[str]:
    return [w for w in normalized_keyword.split() if len(w) > SIGNIFICANT_WORD_MIN_LENGTH]


def count_overlapping(needle: str, haystack: str) -> int:
    if not needle:
        return 0
    count = 0
    index = haystack.find(needle)
    while index != -1:
        count += 1
        index = haystack.find(needle, index + 1)
    return count


def keyword_matches_text(normalized_keyword: str, normalized_text: str) -> bool:
    """Exact substring, or every significant word of a multi-word keyword.

    Both arguments must already be normalized with normalize_for_comparison.
    """
    if not normalized_keyword or not normalized_text:
        return False
    if normalized_keyword in normalized_text:
        return True
    words = significant_words(normalized_keyword)
    return len(words) >= 2 and all(w in normalized_text for w in words)


def count_keyword_occurrences(normalized_keyword: str, normalized_text: str,
                              total_words: int) -> KeywordOccurrences:
    """Exact phrase count plus density, with a significant-word fallback.

    Density is exact count x keyword word count / total words x 100. When
    the exact phrase never occurs, a multi-word keyword whose significant
    words all appear gets a density estimated from its rarest word.
    """
    keyword_words = count_words(normalized_keyword)
    exact = count_overlapping(normalized_keyword, normalized_text)

    if exact > 0 or total_words == 0:
        density = (exact * keyword_words / total_words * 100) if total_words else 0.0
        return KeywordOccurrences(exact, True, density)

    words = significant_words(normalized_keyword)
    if len(words) < 2:
        return KeywordOccurrences(0, False, 0.0)

    counts = [count_overlapping(w, normalized_text) for w in words]
    all_present = all(c > 0 for c in counts)
    density = (min(counts) / total_words * 100) if all_present else 0.0
    return KeywordOccurrences(0, all_present, density)


def calculate_keyword_density(keyword: str, text: str) -> float:
    """Keyword density of raw text, in percent."""
    normalized_text = normalize_for_comparison(text)
    return count_keyword_occurrences(
        normalize_for_comparison(keyword), normalized_text, count_words(normalized_text)
    ).effective_density


def find_placeholders(text: str) -> list[str]:
    """Placeholder markers found in the text (lorem ipsum, TODO...)."""
    found = []
    for pattern in PLACEHOLDER_PATTERNS:
        match = pattern.search(text or "")
        if match:
            found.append(match.group(0))
    return found


def find_repeated_block(
    text: Optional[str],
    min_words: int = REPEATED_BLOCK_MIN_WORDS,
    min_length: int = REPEATED_BLOCK_MIN_LENGTH,
) -> Optional[str]:
    """First run of ``min_words`` words written twice without overlapping.

    Runs shorter than ``min_length`` characters are ignored. Each run is
    hashed once, so the check stays linear in the length of the text.
    """
    words = (text or "").lower().split()
    first_seen: dict[tuple, int] = {}
    for index in range(len(words) - min_words + 1):
        run = tuple(words[index:index + min_words])
        start = first_seen.setdefault(run, index)
        if index - start >= min_words:
            block = ' '.join(run)
            if len(block) >= min_length:
                return block
    return None


# =============================================================================
# Slugs and structure
# =============================================================================

def detect_page_type(slug: Optional[str], local_seo_slugs: Iterable[str] = ()) -> PageType:
    """Classify a page from its slug. Checks run in priority order."""
    if not slug or slug in HOME_SLUGS:
        return PageType.HOME

    s = slug.lower()

    if s in all_legal_slugs():
        return PageType.LEGAL
    if any(part in s for part in (
        'mentions-legales', 'politique-de-confidentialite', 'politique-confidentialite',
        'cgv', 'cgu', 'accessibilite', 'cookies',
        'privacy-policy', 'terms-of-service', 'terms-and-conditions', 'cookie-policy',
    )):
        return PageType.LEGAL
    if s in ('legal', 'privacy', 'terms', 'tos', 'gdpr'):
        return PageType.LEGAL

    if s in ('contact', 'contact-us', 'get-in-touch') or s.endswith('/contact'):
        return PageType.CONTACT

    if any(part in s for part in ('devis', 'inscription', 'support', 'quote', 'signup', 'register', 'apply')):
        return PageType.FORM

    if s in set(local_seo_slugs or ()):
        return PageType.LOCAL_SEO
    if _LOCAL_SEO_PREFIX_FR.match(s) or any(
        part in s for part in ('agence-web-', 'creation-site-', 'developpeur-web-', 'zone-intervention')
    ):
        return PageType.LOCAL_SEO
    if _LOCAL_SEO_PREFIX_EN.match(s) or any(
        part in s for part in ('web-agency-', 'web-design-', 'web-developer-')
    ):
        return PageType.LOCAL_SEO

    if s.startswith(('services/', 'nos-services', 'services-', 'our-services')):
        return PageType.SERVICE

    if s.startswith(('ressources/', 'ressources-', 'resources/', 'resources-')):
        return PageType.RESOURCE

    if any(part in s for part in ('a-propos', 'equipe', 'portfolio', 'about-us')):
        return PageType.AGENCY
    if s.startswith(('agence/', 'agence-')) or s in ('agence', 'about'):
        return PageType.AGENCY

    if s.startswith(('posts/', 'blog/')):
        return PageType.BLOG

    return PageType.GENERIC


def check_heading_hierarchy(headings: Sequence[Heading]) -> bool:
    """False when a heading skips a level on the way down (h2 -> h4)."""
    max_level = 0
    for heading in headings:
        if heading.level > max_level + 1 and max_level > 0:
            return False
        max_level = max(max_level, heading.level)
    return True


def count_long_sections(tree: Any, limit: int) -> int:
    """Runs of paragraphs over ``limit`` words without a heading in between."""
    words_since_heading = 0
    long_sections = 0
    for node in top_level_nodes(tree):
        if node.get('type') == 'heading':
            words_since_heading = 0
            continue
        if node.get('type') == 'paragraph':
            words_since_heading += count_words(extract_plain_text(node))
            if words_since_heading > limit:
                long_sections += 1
                words_since_heading = 0
    return long_sections


def is_stop_word_in_compound(parts: Sequence[str], index: int, locale: str = 'fr') -> bool:
    """True when parts[index] belongs to a fixed expression ("sur-mesure")."""
    word = parts[index]
    next_word = parts[index + 1] if index + 1 < len(parts) else ""
    previous_word = parts[index - 1] if index > 0 else ""
    return any(
        (word == first and next_word == second) or (word == second and previous_word == first)
        for first, second in get_lexicon(locale).stop_word_compounds
    )


# =============================================================================
# Tokenizer
# =============================================================================

def tokenize(text: Optional[str], locale: str = 'fr') -> list[str]:
    """Normalized tokens of at least three characters, stop words removed."""
    stop_words = get_lexicon(locale).research_stop_words
    return [
        token for token in _NON_ALNUM.split(normalize_for_comparison(text))
        if len(token) >= MIN_TOKEN_LENGTH and token not in stop_words
    ]


def extract_ngrams(text: Optional[str], locale: str = 'fr') -> list[str]:
    """Bigrams and trigrams over whitespace-split normalized words.

    A bigram is dropped when both words are stop words; a trigram needs
    at least two non-stop words of three characters or more.
    """
    stop_words = get_lexicon(locale).research_stop_words
    words = [w for w in normalize_for_comparison(text).split() if len(w) >= 2]
    ngrams = []

    for i in range(len(words) - 1):
        first, second = words[i], words[i + 1]
        if not (first in stop_words and second in stop_words):
            ngrams.append(f"{first} {second}")

    for i in range(len(words) - 2):
        trigram = words[i:i + 3]
        meaningful = sum(1 for w in trigram if w not in stop_words and len(w) >= 3)
        if meaningful >= 2:
            ngrams.append(' '.join(trigram))

    return ngrams


def simple_stem(word: str, locale: str = 'fr') -> str:
    """Strip derivational, then inflectional, then plural endings."""
    stem = word
    for suffixes in get_lexicon(locale).stem_suffixes:
        stem = suffixes.sub('', stem)
    return stem
