# src/seo_engine/locales.py
"""Locale word lists and formula constants.

Every heuristic that depends on the language of the content reads its
vocabulary from a Lexicon looked up by locale code. Adding a language
means adding one Lexicon to LEXICONS.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Pattern, Tuple

DEFAULT_LOCALE = "fr"


def _strip_accents(word: str) -> str:
    decomposed = unicodedata.normalize('NFD', word.lower())
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).strip()


@dataclass(frozen=True)
class FleschConstants:
    """Coefficients of a Flesch-family reading ease formula."""
    base: float
    sentence_weight: float
    syllable_weight: float
    pass_score: int
    warn_score: int


@dataclass(frozen=True)
class Lexicon:
    """Language-specific vocabulary used by the rule engine and tokenizer."""
    code: str
    stop_words: FrozenSet[str]
    research_stop_words: FrozenSet[str]
    power_words: Tuple[str, ...]
    sentiment_words: Tuple[str, ...]
    action_verbs: Tuple[str, ...]
    interrogatives: Tuple[str, ...]
    transition_words: Tuple[str, ...]
    generic_anchors: FrozenSet[str]
    utility_slugs: Tuple[str, ...]
    evergreen_slugs: Tuple[str, ...]
    legal_slugs: Tuple[str, ...]
    stop_word_compounds: Tuple[Tuple[str, str], ...]
    abbreviations: Tuple[str, ...]
    numeric_cta_pattern: Pattern
    passive_pattern: Pattern
    flesch: FleschConstants
    long_sentence_words: int
    passive_max_ratio: float
    transitions_min_ratio: float
    stem_suffixes: Tuple[Pattern, ...] = field(default_factory=tuple)
    passive_exclusions: Pattern = None
    cta_question_pattern: Pattern = None


# =============================================================================
# French
# =============================================================================

_FR_STOP_WORDS = [
    'le', 'la', 'les', 'de', 'des', 'du', 'un', 'une',
    'et', 'en', 'pour', 'avec', 'dans', 'sur', 'par',
    'au', 'aux', 'ce', 'ces', 'est', 'sont', 'qui', 'que',
    'dont', 'ou', 'ne', 'pas', 'se', 'sa', 'son', 'ses',
    'nous', 'vous', 'ils', 'leur', 'leurs',
]

_FR_RESEARCH_EXTRAS = [
    'plus', 'tout', 'tous', 'toute', 'toutes', 'être', 'avoir',
    'faire', 'comme', 'mais', 'donc', 'car', 'ni', 'si',
    'très', 'bien', 'aussi', 'peut', 'cette', 'votre',
    'notre', 'vos', 'nos', 'elle', 'elles', 'lui',
    'eux', 'même', 'autres', 'autre', 'entre', 'sans', 'vers',
    'chez', 'sous', 'depuis', 'avant', 'après', 'jusqu',
    'encore', 'déjà', 'toujours', 'jamais', 'rien', 'chaque',
    'peu', 'où', 'quand', 'comment', 'pourquoi', 'quoi',
    'celui', 'celle', 'ceux', 'celles',
]

_FR_TRANSITIONS = (
    # Addition
    'de plus', 'en outre', 'par ailleurs', 'également', 'aussi', 'de même',
    "d'une part", "d'autre part", 'qui plus est', 'de surcroît', 'non seulement',
    # Contrast
    'cependant', 'néanmoins', 'toutefois', 'en revanche', 'tandis que',
    'alors que', 'bien que', 'même si', 'pourtant', 'malgré tout',
    'au contraire', 'or',
    # Cause / consequence
    'par conséquent', 'en effet', 'ainsi', 'donc', 'car', 'puisque',
    'étant donné que', 'en raison de', 'à cause de', 'grâce à',
    "c'est pourquoi", 'de ce fait',
    # Purpose
    'afin de', 'dans le but de', 'pour que', 'de manière à',
    # Sequence
    'puis', 'ensuite', 'enfin', 'premièrement', 'deuxièmement',
    'troisièmement', 'finalement', 'en conclusion', "tout d'abord",
    "d'abord", 'pour commencer', 'pour finir',
    # Illustration / emphasis
    'par exemple', "c'est-à-dire", 'autrement dit', "en d'autres termes",
    'en fait', 'en réalité', 'surtout', 'notamment', 'en particulier',
    'à savoir',
    # Condition
    'à condition que', 'pourvu que', 'en cas de', 'si',
    # Conclusion
    'bref', 'en somme', 'en résumé', 'pour conclure', 'en définitive',
    'somme toute', 'tout compte fait',
)

FRENCH = Lexicon(
    code='fr',
    stop_words=frozenset(_FR_STOP_WORDS),
    research_stop_words=frozenset(_strip_accents(w) for w in _FR_STOP_WORDS + _FR_RESEARCH_EXTRAS),
    power_words=(
        'gratuit', 'exclusif', 'nouveau', 'meilleur', 'secret', 'ultime',
        'essentiel', 'complet', 'rapide', 'efficace', 'simple', 'garanti',
        'prouve', 'unique', 'incontournable', 'revolutionnaire', 'indispensable',
        'exceptionnel', 'professionnel', 'expert', 'guide', 'conseil', 'astuce',
        'methode', 'solution', 'resultat', 'facile', 'puissant', 'fiable', 'premium',
    ),
    sentiment_words=(
        'erreur', 'secret', 'incroyable', 'danger', 'urgent', 'choquant',
        'terrible', 'extraordinaire', 'fascinant', 'etonnant', 'surprenant',
        'impressionnant', 'remarquable', 'crucial', 'vital', 'indispensable',
        'interdit', 'impossible', 'revolutionnaire',
    ),
    action_verbs=(
        'découvrez', 'contactez', 'obtenez', 'profitez', 'demandez',
        'essayez', 'téléchargez', 'réservez', 'commandez', 'inscrivez',
        'appelez', 'trouvez', 'comparez', 'calculez', 'estimez',
        'consultez', 'visitez', 'explorez', 'lancez', 'commencez',
        'transformez', 'optimisez', 'améliorez', 'boostez', 'créez',
        'rejoignez', 'bénéficiez', 'accédez', 'simplifiez', 'recevez',
    ),
    interrogatives=(
        'comment', 'pourquoi', 'quand', 'quel', 'quelle', 'quels', 'quelles',
        'combien', 'ou', 'qui', 'que', 'est-ce',
    ),
    transition_words=_FR_TRANSITIONS,
    generic_anchors=frozenset({
        'cliquez ici', 'cliquer ici', 'en savoir plus', 'ici', 'lire la suite',
        'plus', 'voir plus', 'lien', 'click here', 'read more', 'here', 'more',
    }),
    utility_slugs=(
        'contact', 'about', 'a-propos', 'plan-du-site', 'mentions-legales',
        'politique-de-confidentialite', 'cgv', 'cgu', 'blog', 'accessibilite',
        'cookies', 'support', 'faq', 'equipe', 'portfolio', 'tarifs',
    ),
    evergreen_slugs=(
        'mentions-legales', 'politique-de-confidentialite', 'cgv', 'cgu',
        'plan-du-site', 'contact', 'accessibilite', 'cookies',
    ),
    legal_slugs=(
        'mentions-legales', 'politique-confidentialite', 'plan-du-site',
        'conditions-generales-vente', 'conditions-generales-utilisation',
    ),
    stop_word_compounds=(
        ('en', 'ligne'), ('en', 'france'), ('en', 'production'), ('en', 'pratique'),
        ('sur', 'mesure'), ('pour', 'tous'), ('de', 'site'), ('du', 'web'),
    ),
    abbreviations=('M', 'Mme', 'Mlle', 'Dr', 'etc', 'cf', 'ex'),
    numeric_cta_pattern=re.compile(
        r'\b\d+\s+(?:raisons?|étapes?|astuces?|conseils?|erreurs?|avantages?|clés?'
        r'|points?|façons?|méthodes?|techniques?|outils?|secrets?)\b',
        re.IGNORECASE,
    ),
    passive_pattern=re.compile(
        r'\b(?:est|sont|a\s+été|ont\s+été|sera|seront|fut|furent|était|étaient'
        r'|serait|seraient|avait\s+été|avaient\s+été)\s+(\w+(?:é|ée|és|ées|i|ie|is|ies|u|ue|us|ues))\b',
        re.IGNORECASE,
    ),
    passive_exclusions=re.compile(
        r'\b(?:allée?s?|venue?s?|arrivée?s?|partie?s?|restée?s?|devenue?s?|née?s?'
        r'|morte?s?|tombée?s?|passée?s?|sortie?s?|entrée?s?|montée?s?|descendue?s?'
        r'|retournée?s?)\b',
        re.IGNORECASE,
    ),
    flesch=FleschConstants(
        base=207.0, sentence_weight=1.015, syllable_weight=73.6,
        pass_score=40, warn_score=25,
    ),
    long_sentence_words=25,
    passive_max_ratio=0.15,
    transitions_min_ratio=0.15,
    stem_suffixes=(
        re.compile(r'(?:ement|ation|ition|ment|eur|euse|eux|ique|iste|able|ible|tion|sion)$'),
        re.compile(r'(?:es|er|ez|ent|ant|ait|ais|ions|iez|aient)$'),
        re.compile(r's$'),
    ),
    cta_question_pattern=re.compile(r'\b(?:comment|pourquoi|quand|quel|quelle|quels|quelles)\b', re.IGNORECASE),
)


# =============================================================================
# English
# =============================================================================

_EN_STOP_WORDS = [
    'a', 'an', 'the', 'and', 'or', 'but', 'of', 'to', 'in', 'on', 'at',
    'for', 'with', 'by', 'from', 'as', 'is', 'are', 'was', 'were', 'be',
    'it', 'its', 'this', 'that', 'these', 'those', 'your', 'our', 'their',
]

_EN_RESEARCH_EXTRAS = [
    'about', 'after', 'all', 'also', 'any', 'been', 'before', 'can', 'could',
    'each', 'even', 'every', 'had', 'has', 'have', 'here', 'how', 'into',
    'just', 'more', 'most', 'much', 'must', 'not', 'now', 'only', 'other',
    'over', 'same', 'should', 'some', 'such', 'than', 'then', 'there',
    'they', 'very', 'what', 'when', 'where', 'which', 'while', 'who', 'why',
    'will', 'would', 'you', 'yours', 'we', 'us', 'them', 'his', 'her',
    'she', 'him', 'may', 'might', 'does', 'did', 'doing', 'being', 'get',
]

_EN_TRANSITIONS = (
    # Addition
    'furthermore', 'moreover', 'additionally', 'also', 'besides',
    'in addition', 'what is more', 'not only', 'likewise',
    # Contrast
    'however', 'nevertheless', 'nonetheless', 'on the other hand',
    'in contrast', 'whereas', 'although', 'even though', 'yet',
    'still', 'despite this', 'on the contrary', 'conversely',
    # Cause / consequence
    'therefore', 'consequently', 'as a result', 'thus', 'hence',
    'because', 'since', 'due to', 'owing to', 'thanks to',
    'for this reason', 'accordingly',
    # Purpose
    'in order to', 'so that', 'so as to', 'with the aim of',
    # Sequence
    'then', 'next', 'finally', 'first', 'firstly', 'secondly',
    'thirdly', 'lastly', 'in conclusion', 'to begin with',
    'first of all', 'to start with', 'to sum up', 'meanwhile',
    # Illustration / emphasis
    'for example', 'for instance', 'that is', 'in other words',
    'in fact', 'actually', 'especially', 'particularly', 'notably',
    'namely', 'specifically', 'indeed',
    # Condition
    'provided that', 'as long as', 'in case of', 'if',
    # Conclusion
    'in short', 'in summary', 'to conclude', 'overall',
    'all in all', 'in brief', 'all things considered',
)

ENGLISH = Lexicon(
    code='en',
    stop_words=frozenset(_EN_STOP_WORDS),
    research_stop_words=frozenset(_EN_STOP_WORDS + _EN_RESEARCH_EXTRAS),
    power_words=(
        'free', 'exclusive', 'new', 'best', 'secret', 'ultimate',
        'essential', 'complete', 'fast', 'quick', 'effective', 'simple',
        'guaranteed', 'proven', 'unique', 'must-have', 'revolutionary',
        'exceptional', 'professional', 'expert', 'guide', 'tips', 'easy',
        'powerful', 'reliable', 'premium', 'step-by-step', 'checklist',
        'instant', 'smart',
    ),
    sentiment_words=(
        'mistake', 'secret', 'incredible', 'danger', 'urgent', 'shocking',
        'terrible', 'extraordinary', 'fascinating', 'astonishing', 'surprising',
        'impressive', 'remarkable', 'crucial', 'vital', 'essential', 'forbidden',
        'impossible', 'revolutionary',
    ),
    action_verbs=(
        'discover', 'contact', 'get', 'enjoy', 'request', 'try', 'download',
        'book', 'order', 'sign up', 'call', 'find', 'compare', 'calculate',
        'explore', 'visit', 'learn', 'start', 'launch', 'transform',
        'optimize', 'improve', 'boost', 'create', 'join', 'access',
        'simplify', 'receive', 'save', 'grab',
    ),
    interrogatives=(
        'how', 'why', 'when', 'what', 'which', 'where', 'who', 'can', 'do',
        'does', 'is', 'are', 'should',
    ),
    transition_words=_EN_TRANSITIONS,
    generic_anchors=frozenset({
        'click here', 'read more', 'here', 'more', 'learn more', 'this link',
        'link', 'see more', 'this', 'go',
    }),
    utility_slugs=(
        'contact', 'contact-us', 'about', 'about-us', 'sitemap', 'legal',
        'privacy', 'privacy-policy', 'terms', 'terms-of-service', 'cookies',
        'accessibility', 'blog', 'support', 'faq', 'team', 'portfolio', 'pricing',
    ),
    evergreen_slugs=(
        'legal', 'privacy', 'privacy-policy', 'terms', 'terms-of-service',
        'terms-and-conditions', 'sitemap', 'contact', 'contact-us',
        'accessibility', 'cookies', 'cookie-policy',
    ),
    legal_slugs=(
        'legal', 'legal-notice', 'privacy-policy', 'terms-of-service',
        'terms-and-conditions', 'cookie-policy', 'sitemap',
    ),
    stop_word_compounds=(
        ('in', 'house'), ('on', 'demand'), ('at', 'home'), ('by', 'hand'),
        ('for', 'sale'), ('of', 'the-art'),
    ),
    abbreviations=('Mr', 'Mrs', 'Ms', 'Dr', 'Jr', 'Sr', 'etc', 'vs', 'e.g', 'i.e',
                   'St', 'Inc', 'Ltd', 'Co', 'No'),
    numeric_cta_pattern=re.compile(
        r'\b\d+\s+(?:reasons?|steps?|tips?|tricks?|ideas?|mistakes?|benefits?|ways?'
        r'|methods?|techniques?|tools?|secrets?|examples?)\b',
        re.IGNORECASE,
    ),
    passive_pattern=re.compile(
        r'\b(is|are|was|were|been|being|be|gets|got|gotten)\s+'
        r'(\w+(?:ed|en|wn|ht|lt|nt|pt|ft|ng|xt|un))\b',
        re.IGNORECASE,
    ),
    flesch=FleschConstants(
        base=206.835, sentence_weight=1.015, syllable_weight=84.6,
        pass_score=50, warn_score=30,
    ),
    long_sentence_words=20,
    passive_max_ratio=0.10,
    transitions_min_ratio=0.20,
    stem_suffixes=(
        re.compile(r'(?:ational|ization|fulness|ousness|iveness|ement|ment|ness|tion|sion|able|ible|ance|ence|ism|ist|ity|ive|ize|ise|ful|ous)$'),
        re.compile(r'(?:ing|ied|ies|ed|er|ly)$'),
        re.compile(r's$'),
    ),
    cta_question_pattern=re.compile(r'\b(?:how|why|what|when)\b', re.IGNORECASE),
)


LEXICONS: Dict[str, Lexicon] = {
    FRENCH.code: FRENCH,
    ENGLISH.code: ENGLISH,
}


def get_lexicon(locale: str) -> Lexicon:
    """Return the lexicon for a locale code, falling back to French."""
    if locale in LEXICONS:
        return LEXICONS[locale]
    prefix = (locale or '').split('-')[0].split('_')[0].lower()
    return LEXICONS.get(prefix, LEXICONS[DEFAULT_LOCALE])


def all_evergreen_slugs() -> FrozenSet[str]:
    """Evergreen slugs across every locale; a site may mix languages."""
    return frozenset(s for lex in LEXICONS.values() for s in lex.evergreen_slugs)


def all_legal_slugs() -> FrozenSet[str]:
    return frozenset(s for lex in LEXICONS.values() for s in lex.legal_slugs)
