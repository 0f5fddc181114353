# src/seo_engine/locale.py
"""Selection of the analysis locale for a request."""

import logging
from typing import Mapping, Optional

from seo_engine.locales import DEFAULT_LOCALE

logger = logging.getLogger(__name__)


def resolve_analysis_locale(
    request_locale: Optional[str] = None,
    plugin_locale: Optional[str] = None,
    custom_mapping: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve the locale used for text statistics and messages.

    Precedence: an explicit ``plugin_locale``, then an exact key of
    ``custom_mapping``, then the ``en``/``fr`` prefix of the request
    locale, then a ``custom_mapping`` key the request locale starts with,
    and finally ``fr``.

    Args:
        request_locale: Locale of the incoming request (e.g. "en-US")
        plugin_locale: Static locale configured for the site
        custom_mapping: Request locale to analysis locale mapping

    Returns:
        Analysis locale code
    """
    if plugin_locale:
        return plugin_locale

    if custom_mapping and request_locale and custom_mapping.get(request_locale):
        return custom_mapping[request_locale]

    if request_locale:
        if request_locale.startswith('en'):
            return 'en'
        if request_locale.startswith('fr'):
            return 'fr'
        for key, value in (custom_mapping or {}).items():
            if request_locale.startswith(key):
                return value
        logger.debug(f"No analysis locale for {request_locale!r}, using {DEFAULT_LOCALE}")

    return DEFAULT_LOCALE
