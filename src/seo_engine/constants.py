# src/seo_engine/constants.py
"""Centralized constants for the SEO content engine.

This module contains magic numbers and fixed lists used across the rule
modules and corpus analyzers. For user-configurable thresholds, see
config.py and AnalysisThresholds. Locale-specific word lists live in
locales.py.
"""

import re

# =============================================================================
# Text Extraction Constants
# =============================================================================

# Maximum depth when walking a rich-text tree
MAX_RECURSION_DEPTH = 50

# Heading tag to level mapping
HEADING_LEVELS = {'h1': 1, 'h2': 2, 'h3': 3, 'h4': 4, 'h5': 5, 'h6': 6}

# Slug used for the site root once normalized
HOME_SLUG = "home"

# Slugs treated as the homepage by the link graph
HOME_SLUGS = frozenset({'home', '', 'accueil'})


# =============================================================================
# Scoring Constants
# =============================================================================

# Share of a check's weight earned by a warning (pass earns 1.0, fail 0.0)
WARNING_MULTIPLIER = 0.5

# Default weight per check category
CATEGORY_WEIGHTS = {
    'critical': 3,
    'important': 2,
    'bonus': 1,
}

# Lower bounds (inclusive) for each qualitative level
SCORE_EXCELLENT = 80
SCORE_GOOD = 60
SCORE_OK = 40


# =============================================================================
# Content Analysis Constants
# =============================================================================

# Characters scanned for the keyword in the introduction
INTRO_CHAR_LIMIT = 500

# Minimum words before keyword distribution is meaningful
DISTRIBUTION_MIN_WORDS = 100

# Word count above which at least one list is expected
LISTS_EXPECTED_ABOVE_WORDS = 500

# Readability checks are skipped below this many words
MIN_WORDS_FOR_READABILITY = 50

# Significant keyword words must be longer than this
SIGNIFICANT_WORD_MIN_LENGTH = 3

# Placeholder / unfinished content markers
PLACEHOLDER_PATTERNS = [
    re.compile(r'lorem ipsum', re.IGNORECASE),
    re.compile(r'\bTODO\b'),
    re.compile(r'\bTBD\b'),
    re.compile(r'\bFIXME\b'),
    re.compile(r'\bplaceholder\b', re.IGNORECASE),
    re.compile(r'\btexte ici\b', re.IGNORECASE),
    re.compile(r'\bcontenu a venir\b', re.IGNORECASE),
    re.compile(r'\ba completer\b', re.IGNORECASE),
    re.compile(r'\bXXX\b'),
]


# =============================================================================
# Accessibility Constants
# =============================================================================

# Anchors shorter than this many characters are not descriptive
SHORT_ANCHOR_MIN_CHARS = 3

# Link text share of the full text
LINK_DENSITY_WARN = 0.3
LINK_DENSITY_FAIL = 0.5

# Headings shorter than this are never flagged as all caps
ALL_CAPS_MIN_LENGTH = 4

# Alt texts that are generic placeholders
GENERIC_ALT_PATTERN = re.compile(
    r'^(image|photo|img|picture|screenshot|capture|untitled)\d*$', re.IGNORECASE
)

# Alt texts ending in an image file extension
FILE_EXTENSION_PATTERN = re.compile(r'\.(jpg|jpeg|png|gif|webp|svg|avif)$', re.IGNORECASE)

# Camera and device default file names
CAMERA_FILENAME_PATTERN = re.compile(
    r'\b(IMG_\d+|DSC_\d+|DCIM|photo-\d+|image-\d+|screenshot-\d+)\b', re.IGNORECASE
)


# =============================================================================
# Title Constants
# =============================================================================

# Separators used between page name and brand in titles
TITLE_SEPARATOR_PATTERN = re.compile(r'\s+[|–—]\s+|\s+-\s+')


# =============================================================================
# Quality Constants
# =============================================================================

# A run of this many words (and characters) found twice is a repeated block
REPEATED_BLOCK_MIN_WORDS = 8
REPEATED_BLOCK_MIN_LENGTH = 30

# Boilerplate and filler markers
FILLER_PATTERNS = [
    re.compile(r'\b(lorem ipsum|dolor sit amet|consectetur adipiscing)\b', re.IGNORECASE),
    re.compile(r'\b(texte de remplacement|contenu temporaire|texte generique)\b', re.IGNORECASE),
    re.compile(r'\b(titre de la page|description de la page)\b', re.IGNORECASE),
    re.compile(r'\b(placeholder text|sample text|page title here)\b', re.IGNORECASE),
]


# =============================================================================
# E-commerce Constants
# =============================================================================

# Price mention (amount with currency, either order, or "from X" phrasing)
PRICE_PATTERN = re.compile(
    r'(?:\d+(?:[.,]\d{1,2})?\s*(?:€|EUR|euros?|\$|USD|£|GBP))'
    r'|(?:(?:€|EUR|euros?|\$|USD|£|GBP)\s*\d+(?:[.,]\d{1,2})?)'
    r'|(?:à\s+partir\s+de\s+\d+)|(?:prix\s*:\s*\d+)|(?:tarif\s*:\s*\d+)'
    r'|(?:starting\s+at\s+\d+)|(?:price\s*:\s*\d+)',
    re.IGNORECASE,
)

# Stock and delivery wording
AVAILABILITY_PATTERN = re.compile(
    r'(?:en\s+stock|disponible|rupture\s+de\s+stock|sur\s+commande|livraison|expedition'
    r'|indisponible|pre-?commande|bientôt\s+disponible|delai|disponibilite'
    r'|in\s+stock|out\s+of\s+stock|available|pre-?order|ships\s+in|shipping|delivery|backorder)',
    re.IGNORECASE,
)

# Review and rating wording
REVIEW_PATTERN = re.compile(
    r'(?:avis|review|note|etoile|stars?|rating|évaluation|témoignage|commentaire\s+client'
    r'|testimonial|customer\s+feedback)',
    re.IGNORECASE,
)

# Product description word counts (pass / warning floor)
PRODUCT_DESCRIPTION_MIN_WORDS = 100
PRODUCT_DESCRIPTION_WARN_WORDS = 50

# Minimum product images
PRODUCT_MIN_IMAGES = 2


# =============================================================================
# Link Graph Constants
# =============================================================================

# Outgoing link count above which a page is a hub
HUB_OUTGOING_THRESHOLD = 10

# Minimum shared-segment ratio for a redirect suggestion
SLUG_SUGGESTION_MIN_RATIO = 0.3

# Maximum internal link suggestions returned for one document
MAX_LINK_SUGGESTIONS = 10

# Characters of context kept around a matched keyword
LINK_SUGGESTION_CONTEXT_CHARS = 30


# =============================================================================
# Keyword Research Constants
# =============================================================================

# Minimum token length kept by the tokenizer
MIN_TOKEN_LENGTH = 3

# Minimum global frequency before a term is considered
MIN_TERM_FREQUENCY = 3

# Minimum document frequency for trending terms
TRENDING_MIN_DOC_FREQUENCY = 2

# Minimum n-gram frequency for long-tail suggestions
LONG_TAIL_MIN_FREQUENCY = 2

# Scores below this are dropped (unused and long-tail)
MIN_SUGGESTION_SCORE = 10

# Related suggestions never score above this
RELATED_MAX_SCORE = 80

# Per-category caps
MAX_UNUSED_SUGGESTIONS = 30
MAX_TRENDING_SUGGESTIONS = 20
MAX_RELATED_SUGGESTIONS = 20
MAX_LONG_TAIL_SUGGESTIONS = 30

# Documents listed in suggested_for
MAX_SUGGESTED_FOR = 3

# Unused terms shorter than this are ignored
MIN_UNUSED_TERM_LENGTH = 4


# =============================================================================
# Corpus Loading Constants
# =============================================================================

# Page size used when fetching documents from the data store
CORPUS_PAGE_SIZE = 500


# =============================================================================
# Site Audit Constants
# =============================================================================

# Score bands of the site audit: good from 80, critical below 50
AUDIT_GOOD_SCORE = 80
AUDIT_CRITICAL_SCORE = 50

# Readability is only measured on documents longer than this
AUDIT_READABILITY_MIN_WORDS = 30


# =============================================================================
# External Link Checker Constants
# =============================================================================

# Maximum URLs checked per request
MAX_EXTERNAL_URLS = 100

# Concurrent checks per batch
LINK_CHECK_BATCH_SIZE = 10

# Per-URL timeout in seconds
LINK_CHECK_TIMEOUT_SECONDS = 5.0

# User agent sent with HEAD requests
LINK_CHECKER_USER_AGENT = "SeoAnalyzer-LinkChecker/1.0"

# Link check results are cached for one hour
LINK_CHECK_CACHE_TTL_SECONDS = 60 * 60


# =============================================================================
# Cache Constants
# =============================================================================

# Default TTL for memoized corpus results (15 minutes)
DEFAULT_CACHE_TTL_SECONDS = 15 * 60


# =============================================================================
# Score History Constants
# =============================================================================

# At most one snapshot per document per hour
SNAPSHOT_MIN_INTERVAL_SECONDS = 60 * 60

# Snapshots returned by default / at most
HISTORY_DEFAULT_LIMIT = 30
HISTORY_MAX_LIMIT = 100

# Average score change needed to call a trend improving or declining
TREND_THRESHOLD = 3

# Snapshots per averaging window when computing a trend
TREND_WINDOW = 5
