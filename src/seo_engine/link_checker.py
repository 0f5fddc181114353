"""Reachability checks for external links.

URLs are checked with HEAD requests in bounded concurrent batches; a
failure of one URL never affects its siblings. Private and loopback
hosts are refused before any request is made.
"""

import asyncio
import ipaddress
import logging
import socket
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import aiohttp

from seo_engine.cache import SeoCache
from seo_engine.config import settings
from seo_engine.constants import (
    LINK_CHECK_BATCH_SIZE,
    LINK_CHECK_CACHE_TTL_SECONDS,
    MAX_EXTERNAL_URLS,
)
from seo_engine.models import ExternalLinkReport, ExternalLinkResult
from seo_engine.text_extraction import extract_external_urls

logger = logging.getLogger(__name__)

# Error categories
ERROR_TIMEOUT = 'timeout'
ERROR_DNS = 'dns'
ERROR_CONNECTION = 'connection'
ERROR_SSL = 'ssl'
ERROR_BLOCKED = 'blocked-private-ip'

_LOCAL_HOSTNAMES = {'localhost', 'localhost.localdomain'}


def is_private_url(url: str) -> bool:
    """True for loopback, private, link-local and unspecified hosts.

    URLs that cannot be parsed count as private.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return True
    if not hostname:
        return True

    hostname = hostname.lower().rstrip('.')
    if hostname in _LOCAL_HOSTNAMES or hostname.endswith('.localhost'):
        return True

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        # Decimal, octal and hex IPv4 spellings such as 2130706433 or 0177.0.0.1
        try:
            address = ipaddress.IPv4Address(socket.inet_aton(hostname))
        except (OSError, ValueError):
            return False

    if address.version == 6 and address.ipv4_mapped is not None:
        address = address.ipv4_mapped

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
    )


def classify_error(error: BaseException) -> str:
    """Map a request exception to an error category."""
    if isinstance(error, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return ERROR_TIMEOUT
    if isinstance(error, aiohttp.ClientSSLError):
        return ERROR_SSL
    if isinstance(error, aiohttp.ClientConnectorError):
        if isinstance(getattr(error, 'os_error', None), socket.gaierror):
            return ERROR_DNS
        return ERROR_CONNECTION
    return ERROR_CONNECTION


def collect_external_urls(
    sources: Iterable[Tuple[str, dict]],
    site_url: Optional[str] = None,
) -> Dict[str, List[str]]:
    """External URLs of raw documents and the pages linking to them.

    Args:
        sources: (collection, raw document) pairs
        site_url: Site origin; links to its host are not external

    Returns:
        URL to list of "collection/slug" source pages, in first-seen order
    """
    site_host = urlparse(site_url).hostname if site_url else None
    url_sources: Dict[str, List[str]] = {}
    for collection, raw_doc in sources:
        if not isinstance(raw_doc, dict):
            continue
        page = f"{collection}/{raw_doc.get('slug') or ''}"
        for url in extract_external_urls(raw_doc, site_host):
            pages = url_sources.setdefault(url, [])
            if page not in pages:
                pages.append(page)
    return url_sources


class ExternalLinkChecker:
    """Checks external URLs concurrently with HEAD requests."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        cache: Optional[SeoCache] = None,
        batch_size: int = LINK_CHECK_BATCH_SIZE,
        max_urls: int = MAX_EXTERNAL_URLS,
    ):
        """Initialize the checker.

        Args:
            timeout: Per-URL timeout in seconds
            user_agent: User-Agent header sent with each request
            cache: Result cache; a private one-hour cache when omitted
            batch_size: URLs checked concurrently
            max_urls: URLs checked per report
        """
        self.timeout = timeout if timeout is not None else settings.LINK_CHECK_TIMEOUT
        self.user_agent = user_agent or settings.USER_AGENT
        self.cache = cache if cache is not None else SeoCache(ttl_seconds=LINK_CHECK_CACHE_TTL_SECONDS)
        self.batch_size = batch_size
        self.max_urls = max_urls

    async def check_url(self, session: aiohttp.ClientSession, url: str) -> ExternalLinkResult:
        """Check one URL; errors are returned as categorized results."""
        if is_private_url(url):
            logger.debug(f"Refusing private URL {url}")
            return ExternalLinkResult(url=url, status=None, ok=False, error=ERROR_BLOCKED)

        try:
            async with session.head(
                url,
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent},
            ) as response:
                final_url = str(response.url)
                return ExternalLinkResult(
                    url=url,
                    status=response.status,
                    ok=200 <= response.status < 400,
                    redirected_to=final_url if final_url != url else None,
                )
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            category = classify_error(e)
            logger.debug(f"Link check failed for {url}: {category} ({e})")
            return ExternalLinkResult(url=url, status=None, ok=False, error=category)

    async def _check_cached(self, session: aiohttp.ClientSession, url: str,
                            force_refresh: bool) -> ExternalLinkResult:
        key = f"external-link::{url}"
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        result = await self.check_url(session, url)
        self.cache.set(key, result)
        return result

    async def check_urls(
        self,
        url_sources: Dict[str, List[str]],
        force_refresh: bool = False,
    ) -> ExternalLinkReport:
        """Check up to ``max_urls`` URLs in batches.

        Args:
            url_sources: URL to the pages linking to it
            force_refresh: Ignore cached results

        Returns:
            ExternalLinkReport with failing URLs first
        """
        urls = list(url_sources)[:self.max_urls]
        checked: List[ExternalLinkResult] = []

        async with aiohttp.ClientSession() as session:
            for start in range(0, len(urls), self.batch_size):
                batch = urls[start:start + self.batch_size]
                results = await asyncio.gather(
                    *(self._check_cached(session, url, force_refresh) for url in batch)
                )
                checked.extend(results)
                logger.debug(f"Checked {start + len(batch)}/{len(urls)} external URLs")

        results = [
            ExternalLinkResult(
                url=result.url,
                status=result.status,
                ok=result.ok,
                source_pages=list(url_sources.get(result.url, [])),
                error=result.error,
                redirected_to=result.redirected_to,
            )
            for result in checked
        ]
        results.sort(key=lambda r: r.ok)

        stats = {
            'total': len(results),
            'ok': sum(1 for r in results if r.ok),
            'broken': sum(1 for r in results if not r.ok and not r.error),
            'timeout': sum(1 for r in results if r.error == ERROR_TIMEOUT),
        }
        logger.info(f"External links: {stats['ok']}/{stats['total']} reachable")
        return ExternalLinkReport(
            results=results,
            stats=stats,
            checked_at=datetime.now(timezone.utc).isoformat(),
        )


def check_external_links(url_sources: Dict[str, List[str]], force_refresh: bool = False,
                         **kwargs) -> ExternalLinkReport:
    """Synchronous wrapper around ExternalLinkChecker.check_urls."""
    checker = ExternalLinkChecker(**kwargs)
    return asyncio.run(checker.check_urls(url_sources, force_refresh=force_refresh))
