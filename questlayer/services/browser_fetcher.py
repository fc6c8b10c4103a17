"""Playwright-based fetch strategy for JavaScript-rendered or bot-protected pages."""

import logging
from typing import Optional

import httpx
from playwright.async_api import async_playwright

from questlayer.config import Settings
from questlayer.services.fetcher import USER_AGENTS, is_bot_wall, truncate_content

logger = logging.getLogger(__name__)

SETTLE_DELAY_MS = 1200
_BLOCKED_RESOURCE_TYPES = {"image", "font"}

# Hides the most common automation fingerprint from page scripts
_MASK_WEBDRIVER_JS = (
    "Object.defineProperty(navigator, 'webdriver', { get: () => undefined });"
)


async def _block_heavy_resources(route) -> None:
    if route.request.resource_type in _BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def fetch_url_with_browser(
    url: str,
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Render *url* with a headless Chromium browser and return the full HTML.

    Disabled unless ``settings.enable_browser`` is set.  Any failure (launch,
    navigation timeout, bot wall) yields *None*.  *client* is unused; it keeps
    the signature uniform with the other fetch strategies.
    """
    if not settings.enable_browser:
        return None

    timeout_ms = int(settings.fetch_timeout * 1000)
    try:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=True,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    # --no-sandbox is required when running as root inside a container
                    "--no-sandbox",
                    "--disable-dev-shm-usage",
                ],
            )
            try:
                context = await browser.new_context(
                    user_agent=USER_AGENTS[0],
                    viewport={"width": 1280, "height": 720},
                    locale="en-US",
                )
                page = await context.new_page()
                await page.add_init_script(_MASK_WEBDRIVER_JS)
                await page.route("**/*", _block_heavy_resources)
                await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                await page.wait_for_timeout(SETTLE_DELAY_MS)
                html = await page.content()
                await context.close()
            finally:
                await browser.close()
    except Exception as exc:
        logger.warning("Browser fetch failed for %s (%s)", url, exc)
        return None

    if not html or is_bot_wall(html):
        return None
    return truncate_content(html)
