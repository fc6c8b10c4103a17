"""Plain HTTP fetch strategies: rotating-identity GET and the text-extraction relay."""

import logging
from typing import Optional
from urllib.parse import urljoin

import httpx

from questlayer.config import Settings
from questlayer.services.normalizer import strip_scheme, validate_url

logger = logging.getLogger(__name__)

MAX_CONTENT_SIZE = 1_000_000  # bytes
MAX_REDIRECTS = 10

USER_AGENTS = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_3) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.3 Safari/605.1.15",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
)

_BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# Lowercase substrings that identify anti-bot challenge pages
BOT_WALL_MARKERS = (
    "just a moment",
    "cf-browser-verification",
    "cf-chl",
    "attention required",
    "cloudflare",
    "captcha",
    "access denied",
)


def is_bot_wall(html: str) -> bool:
    """Return True when *html* looks like a CAPTCHA / JS-challenge page."""
    signal = html.lower()
    return any(marker in signal for marker in BOT_WALL_MARKERS)


def truncate_content(text: str, limit: int = MAX_CONTENT_SIZE) -> str:
    """Cut *text* so that its UTF-8 encoding is at most *limit* bytes."""
    encoded = text.encode()
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode(errors="ignore")


async def _read_limited(response: httpx.Response) -> str:
    """Read at most MAX_CONTENT_SIZE bytes of a streamed response body."""
    chunks = []
    total = 0
    async for chunk in response.aiter_bytes():
        chunks.append(chunk)
        total += len(chunk)
        if total >= MAX_CONTENT_SIZE:
            break
    body = b"".join(chunks)[:MAX_CONTENT_SIZE]
    try:
        return body.decode(response.encoding or "utf-8", errors="ignore")
    except LookupError:
        # Unknown charset declared in the Content-Type header
        return body.decode("utf-8", errors="ignore")


async def _get_html(
    client: httpx.AsyncClient, url: str, user_agent: str, timeout: float
) -> Optional[str]:
    """Fetch *url* as *user_agent*; return the HTML body or *None* if unusable.

    Redirects are followed manually so that every redirect destination is
    validated against the SSRF rules before the next request is made.
    """
    headers = {"User-Agent": user_agent, **_BROWSER_HEADERS}
    current_url = url
    for _ in range(MAX_REDIRECTS + 1):
        async with client.stream(
            "GET", current_url, headers=headers, timeout=timeout, follow_redirects=False
        ) as response:
            if response.is_redirect:
                location = response.headers.get("location", "")
                next_url = urljoin(current_url, location)
                validate_url(next_url)
                current_url = next_url
                continue

            if not response.is_success:
                logger.debug("Direct fetch: HTTP %s for %s", response.status_code, current_url)
                return None

            content_type = response.headers.get("content-type", "")
            if "text/html" not in content_type.lower():
                logger.debug("Direct fetch: non-HTML content type %r for %s", content_type, url)
                return None

            html = await _read_limited(response)
            if is_bot_wall(html):
                logger.debug("Direct fetch: bot wall detected for %s", url)
                return None
            return html

    logger.debug("Direct fetch: too many redirects for %s", url)
    return None


async def fetch_direct(
    url: str, settings: Settings, client: httpx.AsyncClient
) -> Optional[str]:
    """Try every client identity in turn; return the first usable HTML page."""
    for user_agent in USER_AGENTS:
        try:
            html = await _get_html(client, url, user_agent, settings.fetch_timeout)
        except (ValueError, httpx.HTTPError) as exc:
            logger.debug("Direct fetch: %s failed (%s)", url, exc)
            continue
        if html:
            return html
    return None


async def fetch_via_reader(
    url: str, settings: Settings, client: httpx.AsyncClient
) -> Optional[str]:
    """Fetch the readable-text rendition of *url* from the text-extraction relay."""
    target = f"{settings.reader_base_url}{strip_scheme(url)}"
    try:
        response = await client.get(
            target,
            headers={"User-Agent": USER_AGENTS[0], "Accept": "text/plain"},
            timeout=settings.fetch_timeout,
        )
    except httpx.HTTPError as exc:
        logger.debug("Reader fetch: %s failed (%s)", url, exc)
        return None

    if not response.is_success:
        logger.debug("Reader fetch: HTTP %s for %s", response.status_code, url)
        return None

    text = truncate_content(response.text)
    return text or None
