"""Sitemap-based URL discovery via ``robots.txt`` declarations."""

import logging
import re
from typing import List, Optional, Pattern, Sequence
from urllib.parse import urljoin

import httpx

from questlayer.config import Settings
from questlayer.services.fetcher import MAX_REDIRECTS, truncate_content
from questlayer.services.normalizer import validate_url

logger = logging.getLogger(__name__)

MAX_SITEMAPS = 3
MAX_SITEMAP_URLS = 200

_LOC_RE = re.compile(r"<loc>\s*([^<]+?)\s*</loc>", re.IGNORECASE)

DOCS_PATTERNS = (
    re.compile(r"/docs\b", re.IGNORECASE),
    re.compile(r"/documentation\b", re.IGNORECASE),
    re.compile(r"/docs/", re.IGNORECASE),
)
BLOG_PATTERNS = (
    re.compile(r"/blog\b", re.IGNORECASE),
    re.compile(r"/news\b", re.IGNORECASE),
    re.compile(r"/updates\b", re.IGNORECASE),
)
APP_PATTERNS = (
    re.compile(r"/app\b", re.IGNORECASE),
    re.compile(r"/launch\b", re.IGNORECASE),
    re.compile(r"/dashboard\b", re.IGNORECASE),
)


async def _fetch_text(client: httpx.AsyncClient, url: str, timeout: float) -> str:
    """Return the response body of *url* as text, or an empty string on failure.

    Sitemap locations come from the site itself, so *url* and every redirect
    hop must pass the same address checks as the page fetch.
    """
    current_url = url
    for _ in range(MAX_REDIRECTS + 1):
        try:
            validate_url(current_url)
            response = await client.get(current_url, timeout=timeout, follow_redirects=False)
        except ValueError as exc:
            logger.warning("Sitemap: refusing %s (%s)", current_url, exc)
            return ""
        except httpx.HTTPError as exc:
            logger.debug("Sitemap: fetching %s failed (%s)", current_url, exc)
            return ""
        if response.is_redirect:
            current_url = urljoin(current_url, response.headers.get("location", ""))
            continue
        if not response.is_success:
            return ""
        return truncate_content(response.text)

    logger.debug("Sitemap: too many redirects for %s", url)
    return ""


def parse_robots_for_sitemaps(robots_text: str) -> List[str]:
    """Return every ``Sitemap:`` URL declared in *robots_text*, in order."""
    sitemaps: List[str] = []
    for line in robots_text.splitlines():
        trimmed = line.strip()
        if not trimmed.lower().startswith("sitemap:"):
            continue
        value = trimmed.split(":", 1)[1].strip()
        if value:
            sitemaps.append(value)
    return sitemaps


def parse_sitemap(xml_text: str) -> List[str]:
    """Extract all ``<loc>`` values from a sitemap or sitemap-index document."""
    return [loc for loc in _LOC_RE.findall(xml_text) if loc]


async def discover_urls_via_sitemap(
    origin: str,
    settings: Settings,
    client: httpx.AsyncClient,
) -> List[str]:
    """Collect up to MAX_SITEMAP_URLS URLs from the sitemaps in *origin*'s robots.txt.

    Only the first MAX_SITEMAPS declarations are read.  Unreachable robots.txt
    or sitemap files contribute nothing.
    """
    robots = await _fetch_text(client, f"{origin.rstrip('/')}/robots.txt", settings.fetch_timeout)
    sitemaps = parse_robots_for_sitemaps(robots)[:MAX_SITEMAPS]

    urls: List[str] = []
    for sitemap_url in sitemaps:
        xml_text = await _fetch_text(client, sitemap_url, settings.fetch_timeout)
        if not xml_text:
            continue
        urls.extend(parse_sitemap(xml_text))
        if len(urls) >= MAX_SITEMAP_URLS:
            break

    if urls:
        logger.info("Sitemap: found %d URLs for %s", len(urls), origin)
    return urls[:MAX_SITEMAP_URLS]


def pick_url_by_pattern(urls: Sequence[str], patterns: Sequence[Pattern]) -> Optional[str]:
    """Return the first URL matching the highest-priority pattern that matches any."""
    for pattern in patterns:
        for url in urls:
            if pattern.search(url):
                return url
    return None
