"""Tests for questlayer.services.sitemap."""

import httpx
import pytest

from conftest import make_client, text_page
from questlayer.services.sitemap import (
    APP_PATTERNS,
    BLOG_PATTERNS,
    DOCS_PATTERNS,
    MAX_SITEMAP_URLS,
    discover_urls_via_sitemap,
    parse_robots_for_sitemaps,
    parse_sitemap,
    pick_url_by_pattern,
)

_ORIGIN = "https://acme.xyz"


def _urlset(urls):
    locs = "".join(f"<url><loc>{u}</loc></url>" for u in urls)
    return f'<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{locs}</urlset>'


class TestParseRobots:
    def test_collects_sitemap_lines_case_insensitively(self):
        robots = (
            "User-agent: *\nDisallow: /admin\n"
            "Sitemap: https://acme.xyz/sitemap.xml\n"
            "  SITEMAP:https://acme.xyz/blog-sitemap.xml  \n"
        )
        assert parse_robots_for_sitemaps(robots) == [
            "https://acme.xyz/sitemap.xml",
            "https://acme.xyz/blog-sitemap.xml",
        ]

    def test_no_sitemaps(self):
        assert parse_robots_for_sitemaps("User-agent: *\nAllow: /") == []


class TestParseSitemap:
    def test_extracts_loc_values(self):
        xml = _urlset(["https://acme.xyz/", "https://acme.xyz/docs"])
        assert parse_sitemap(xml) == ["https://acme.xyz/", "https://acme.xyz/docs"]

    def test_garbage_yields_nothing(self):
        assert parse_sitemap("<html>not a sitemap</html>") == []


class TestDiscover:
    @pytest.mark.asyncio
    async def test_reads_declared_sitemaps(self, settings):
        routes = {
            f"{_ORIGIN}/robots.txt": text_page(f"Sitemap: {_ORIGIN}/sitemap.xml"),
            f"{_ORIGIN}/sitemap.xml": text_page(_urlset([f"{_ORIGIN}/a", f"{_ORIGIN}/b"])),
        }
        async with make_client(routes) as client:
            urls = await discover_urls_via_sitemap(_ORIGIN, settings, client)
        assert urls == [f"{_ORIGIN}/a", f"{_ORIGIN}/b"]

    @pytest.mark.asyncio
    async def test_only_first_three_sitemaps(self, settings):
        robots = "\n".join(f"Sitemap: {_ORIGIN}/s{i}.xml" for i in range(5))
        requested = []

        def sitemap(request):
            requested.append(str(request.url))
            return httpx.Response(200, text=_urlset([f"{request.url}/page"]))

        routes = {f"{_ORIGIN}/robots.txt": text_page(robots)}
        routes.update({f"{_ORIGIN}/s{i}.xml": sitemap for i in range(5)})
        async with make_client(routes) as client:
            urls = await discover_urls_via_sitemap(_ORIGIN, settings, client)
        assert len(urls) == 3
        assert requested == [f"{_ORIGIN}/s{i}.xml" for i in range(3)]

    @pytest.mark.asyncio
    async def test_caps_at_max_urls(self, settings):
        big = _urlset([f"{_ORIGIN}/p{i}" for i in range(150)])
        robots = f"Sitemap: {_ORIGIN}/one.xml\nSitemap: {_ORIGIN}/two.xml\nSitemap: {_ORIGIN}/three.xml"
        routes = {
            f"{_ORIGIN}/robots.txt": text_page(robots),
            f"{_ORIGIN}/one.xml": text_page(big),
            f"{_ORIGIN}/two.xml": text_page(big),
            f"{_ORIGIN}/three.xml": lambda r: pytest.fail("limit already reached"),
        }
        async with make_client(routes) as client:
            urls = await discover_urls_via_sitemap(_ORIGIN, settings, client)
        assert len(urls) == MAX_SITEMAP_URLS

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self, settings):
        def boom(request):
            raise httpx.ReadTimeout("slow", request=request)

        routes = {
            f"{_ORIGIN}/robots.txt": text_page(
                f"Sitemap: {_ORIGIN}/broken.xml\nSitemap: {_ORIGIN}/ok.xml"
            ),
            f"{_ORIGIN}/broken.xml": boom,
            f"{_ORIGIN}/ok.xml": text_page(_urlset([f"{_ORIGIN}/fine"])),
        }
        async with make_client(routes) as client:
            urls = await discover_urls_via_sitemap(_ORIGIN, settings, client)
        assert urls == [f"{_ORIGIN}/fine"]

    @pytest.mark.asyncio
    async def test_missing_robots(self, settings):
        async with make_client({}) as client:
            assert await discover_urls_via_sitemap(_ORIGIN, settings, client) == []

    @pytest.mark.asyncio
    async def test_private_sitemap_host_not_requested(self, settings, monkeypatch):
        monkeypatch.setattr(
            "questlayer.services.normalizer._is_private_address",
            lambda hostname: hostname.startswith("169.254."),
        )
        routes = {
            f"{_ORIGIN}/robots.txt": text_page("Sitemap: http://169.254.169.254/sitemap.xml"),
            "http://169.254.169.254/sitemap.xml": lambda r: pytest.fail("private host requested"),
        }
        async with make_client(routes) as client:
            assert await discover_urls_via_sitemap(_ORIGIN, settings, client) == []

    @pytest.mark.asyncio
    async def test_redirect_to_private_host_not_followed(self, settings, monkeypatch):
        monkeypatch.setattr(
            "questlayer.services.normalizer._is_private_address",
            lambda hostname: hostname == "10.0.0.5",
        )
        routes = {
            f"{_ORIGIN}/robots.txt": text_page(f"Sitemap: {_ORIGIN}/sitemap.xml"),
            f"{_ORIGIN}/sitemap.xml": lambda r: httpx.Response(
                302, headers={"Location": "http://10.0.0.5/sitemap.xml"}
            ),
            "http://10.0.0.5/sitemap.xml": lambda r: pytest.fail("redirect target requested"),
        }
        async with make_client(routes) as client:
            assert await discover_urls_via_sitemap(_ORIGIN, settings, client) == []

    @pytest.mark.asyncio
    async def test_public_redirect_followed(self, settings):
        routes = {
            f"{_ORIGIN}/robots.txt": lambda r: httpx.Response(
                301, headers={"Location": "https://www.acme.xyz/robots.txt"}
            ),
            "https://www.acme.xyz/robots.txt": text_page("Sitemap: https://www.acme.xyz/s.xml"),
            "https://www.acme.xyz/s.xml": text_page(_urlset(["https://www.acme.xyz/docs"])),
        }
        async with make_client(routes) as client:
            urls = await discover_urls_via_sitemap(_ORIGIN, settings, client)
        assert urls == ["https://www.acme.xyz/docs"]


class TestPickUrlByPattern:
    _URLS = [
        "https://acme.xyz/about",
        "https://acme.xyz/documentation/intro",
        "https://acme.xyz/docs",
        "https://acme.xyz/news/day-one",
        "https://acme.xyz/dashboard",
    ]

    def test_pattern_priority_beats_list_order(self):
        assert pick_url_by_pattern(self._URLS, DOCS_PATTERNS) == "https://acme.xyz/docs"

    def test_blog_and_app(self):
        assert pick_url_by_pattern(self._URLS, BLOG_PATTERNS) == "https://acme.xyz/news/day-one"
        assert pick_url_by_pattern(self._URLS, APP_PATTERNS) == "https://acme.xyz/dashboard"

    def test_no_match(self):
        assert pick_url_by_pattern(["https://acme.xyz/"], DOCS_PATTERNS) is None
