# tests/test_link_checker.py
"""Tests for external link checking."""

import asyncio
import socket
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from seo_engine.cache import SeoCache
from seo_engine.link_checker import (
    ERROR_BLOCKED,
    ERROR_CONNECTION,
    ERROR_DNS,
    ERROR_TIMEOUT,
    ExternalLinkChecker,
    classify_error,
    collect_external_urls,
    is_private_url,
)
from seo_engine.models import ExternalLinkResult


def rich_text_link(url):
    return {'root': {'children': [{'type': 'paragraph', 'children': [
        {'type': 'link', 'fields': {'url': url}, 'children': [{'type': 'text', 'text': 'source'}]},
    ]}]}}


def mock_session(status=200, final_url=None):
    response = MagicMock()
    response.status = status
    response.url = final_url
    session = MagicMock()
    session.head.return_value.__aenter__.return_value = response
    return session


class TestUrlHelpers:
    """Tests for URL classification helpers."""

    @pytest.mark.parametrize("url", [
        "http://localhost:8000/",
        "http://app.localhost/",
        "http://127.0.0.1/",
        "http://10.0.0.5/admin",
        "http://192.168.1.1/",
        "http://169.254.169.254/latest/meta-data",
        "http://[::1]/",
        "http://0.0.0.0/",
        "http://2130706433/",
        "http://0177.0.0.1/",
        "http://0x7f.0.0.1/",
        "http://[::ffff:127.0.0.1]/",
        "not a url",
    ])
    def test_private_urls(self, url):
        """Loopback, private, link-local and unparseable hosts are refused."""
        assert is_private_url(url)

    @pytest.mark.parametrize("url", [
        "https://example.com/page",
        "https://8.8.8.8/",
        "https://café.fr/",
    ])
    def test_public_urls(self, url):
        """Public hosts are allowed."""
        assert not is_private_url(url)

    def test_classify_error(self):
        """Exceptions map to error categories."""
        dns_failure = aiohttp.ClientConnectorError(MagicMock(), socket.gaierror(-2, "Name or service not known"))
        refused = aiohttp.ClientConnectorError(MagicMock(), ConnectionRefusedError(111, "Connection refused"))

        assert classify_error(asyncio.TimeoutError()) == ERROR_TIMEOUT
        assert classify_error(dns_failure) == ERROR_DNS
        assert classify_error(refused) == ERROR_CONNECTION
        assert classify_error(aiohttp.ClientPayloadError()) == ERROR_CONNECTION

    def test_collect_external_urls(self):
        """URLs are grouped with their source pages; the site host is excluded."""
        sources = [
            ('pages', {'slug': 'a', 'content': rich_text_link("https://example.org/doc")}),
            ('posts', {'slug': 'b', 'content': rich_text_link("https://example.org/doc")}),
            ('pages', {'slug': 'c', 'content': rich_text_link("https://mysite.com/page")}),
            ('pages', None),
        ]
        url_sources = collect_external_urls(sources, site_url="https://mysite.com")
        assert url_sources == {"https://example.org/doc": ["pages/a", "posts/b"]}


class TestExternalLinkChecker:
    """Test cases for ExternalLinkChecker."""

    @pytest.fixture
    def checker(self):
        return ExternalLinkChecker(timeout=1, user_agent="test-agent", cache=SeoCache(ttl_seconds=60))

    @pytest.mark.asyncio
    async def test_reachable_url(self, checker):
        """2xx responses are ok and send the configured User-Agent."""
        session = mock_session(200, "https://example.com/")
        result = await checker.check_url(session, "https://example.com/")

        assert result.ok
        assert result.status == 200
        assert result.redirected_to is None
        _, kwargs = session.head.call_args
        assert kwargs['headers'] == {'User-Agent': 'test-agent'}
        assert kwargs['allow_redirects'] is True

    @pytest.mark.asyncio
    async def test_redirect_is_reported(self, checker):
        """The final URL is kept when it differs from the requested one."""
        session = mock_session(200, "https://www.example.com/")
        result = await checker.check_url(session, "https://example.com/")
        assert result.redirected_to == "https://www.example.com/"

    @pytest.mark.asyncio
    async def test_not_found(self, checker):
        """4xx responses are broken without an error category."""
        session = mock_session(404, "https://example.com/missing")
        result = await checker.check_url(session, "https://example.com/missing")
        assert not result.ok
        assert result.status == 404
        assert result.error is None

    @pytest.mark.asyncio
    async def test_timeout(self, checker):
        """Timeouts become categorized results instead of exceptions."""
        session = MagicMock()
        session.head.side_effect = asyncio.TimeoutError()
        result = await checker.check_url(session, "https://slow.example.com/")
        assert not result.ok
        assert result.error == ERROR_TIMEOUT

    @pytest.mark.asyncio
    async def test_private_url_is_not_requested(self, checker):
        """Private hosts are blocked before any request."""
        session = MagicMock()
        result = await checker.check_url(session, "http://127.0.0.1:8080/")
        assert result.error == ERROR_BLOCKED
        session.head.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_urls_report(self, checker):
        """Failing URLs come first and carry their source pages."""
        outcomes = {
            "https://ok.example.com/": ExternalLinkResult(url="https://ok.example.com/", status=200, ok=True),
            "https://gone.example.com/": ExternalLinkResult(url="https://gone.example.com/", status=404, ok=False),
            "https://slow.example.com/": ExternalLinkResult(
                url="https://slow.example.com/", status=None, ok=False, error=ERROR_TIMEOUT),
        }
        url_sources = {url: [f"pages/{i}"] for i, url in enumerate(outcomes)}

        with patch("aiohttp.ClientSession"), \
                patch.object(checker, 'check_url', AsyncMock(side_effect=lambda s, url: outcomes[url])):
            report = await checker.check_urls(url_sources)

        assert [r.ok for r in report.results] == [False, False, True]
        assert report.results[-1].source_pages == ["pages/0"]
        assert report.stats == {'total': 3, 'ok': 1, 'broken': 1, 'timeout': 1}
        assert report.checked_at is not None

    @pytest.mark.asyncio
    async def test_results_are_cached(self, checker):
        """A second run reuses cached results unless a refresh is forced."""
        url_sources = {"https://example.com/": ["pages/home"]}
        check = AsyncMock(return_value=ExternalLinkResult(url="https://example.com/", status=200, ok=True))

        with patch("aiohttp.ClientSession"), patch.object(checker, 'check_url', check):
            await checker.check_urls(url_sources)
            await checker.check_urls(url_sources)
            assert check.await_count == 1

            await checker.check_urls(url_sources, force_refresh=True)
            assert check.await_count == 2

    @pytest.mark.asyncio
    async def test_max_urls(self):
        """Only the first ``max_urls`` URLs are checked."""
        checker = ExternalLinkChecker(cache=SeoCache(), max_urls=2, batch_size=1)
        url_sources = {f"https://example.com/{i}": [] for i in range(5)}
        check = AsyncMock(side_effect=lambda s, url: ExternalLinkResult(url=url, status=200, ok=True))

        with patch("aiohttp.ClientSession"), patch.object(checker, 'check_url', check):
            report = await checker.check_urls(url_sources)

        assert report.stats['total'] == 2
        assert check.await_count == 2
