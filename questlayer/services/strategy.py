"""Fetch orchestration: tries each retrieval strategy until one yields content."""

import logging
from typing import Awaitable, Callable, List, NamedTuple, Optional, Tuple

import httpx

from questlayer.config import Settings
from questlayer.models.profile import SourceKind
from questlayer.services.browser_fetcher import fetch_url_with_browser
from questlayer.services.fetcher import fetch_direct, fetch_via_reader

logger = logging.getLogger(__name__)

FetchStrategy = Callable[[str, Settings, httpx.AsyncClient], Awaitable[Optional[str]]]


class FetchResult(NamedTuple):
    content: str
    source_kind: SourceKind


def default_strategies() -> List[Tuple[str, SourceKind, FetchStrategy]]:
    """Return the strategies in escalation order.

    Looked up at call time so the individual strategies can be patched.
    """
    return [
        ("direct", "html", fetch_direct),
        ("browser", "html", fetch_url_with_browser),
        ("reader", "extracted-text", fetch_via_reader),
    ]


async def fetch_page(
    url: str,
    settings: Settings,
    client: httpx.AsyncClient,
) -> Optional[FetchResult]:
    """Return the first non-empty result of the fetch strategies, or *None*.

    Detection order:
    1. Direct HTTP with rotating client identities
    2. Headless browser (only when enabled)
    3. Text-extraction relay
    """
    for name, source_kind, strategy in default_strategies():
        content = await strategy(url, settings, client)
        if content:
            logger.info("Fetch: %s strategy succeeded for %s", name, url)
            return FetchResult(content=content, source_kind=source_kind)
        logger.debug("Fetch: %s strategy yielded nothing for %s", name, url)

    logger.warning("Fetch: all strategies exhausted for %s", url)
    return None
